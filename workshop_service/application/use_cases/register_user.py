from ...domain.entities import Role, User
from ...domain.errors import EmailAlreadyRegisteredError

class IUserRepository:
    def get_by_email(self, email: str) -> User | None: ...
    def create(self, name: str, email: str, password_hash: str, role: Role) -> User: ...

class IPasswordHasher:
    def hash(self, plain: str) -> str: ...

class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, name: str, email: str, password: str, role: Role) -> User:
        if self.repo.get_by_email(email):
            raise EmailAlreadyRegisteredError("User already registered.")
        pwd_hash = self.hasher.hash(password)
        return self.repo.create(name, email, pwd_hash, role)
