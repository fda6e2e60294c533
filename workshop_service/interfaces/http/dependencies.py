from fastapi import BackgroundTasks, Request

from ...application.notifications import Dispatch, INotifier


def get_notifier(request: Request) -> INotifier:
    return request.app.state.notifier


def background_dispatch(background_tasks: BackgroundTasks, notifier: INotifier) -> Dispatch:
    """Queue notifications to run after the response has been sent."""
    def dispatch(user_id: int, subject: str, body: str) -> None:
        background_tasks.add_task(notifier.notify, user_id, subject, body)
    return dispatch
