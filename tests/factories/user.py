"""User and registration factories for tests."""

from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory

from tbsa.modules.users.schemas import OrganizationRegisterRequest, RegisterRequest


class RegisterRequestFactory(ModelFactory[RegisterRequest]):
    """Factory for owner registration payloads."""

    __model__ = RegisterRequest

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"owner-{uuid4().hex[:8]}@example.com"

    @classmethod
    def password(cls) -> str:
        return "SecurePass123"

    @classmethod
    def first_name(cls) -> str:
        return "Andrei"

    @classmethod
    def last_name(cls) -> str:
        return f"Test {uuid4().hex[:4]}"

    @classmethod
    def phone(cls) -> str | None:
        return None


class OrganizationRegisterRequestFactory(ModelFactory[OrganizationRegisterRequest]):
    """Factory for organization registration payloads."""

    __model__ = OrganizationRegisterRequest

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"admin-{uuid4().hex[:8]}@example.com"

    @classmethod
    def password(cls) -> str:
        return "SecurePass123"

    @classmethod
    def first_name(cls) -> str:
        return "Elena"

    @classmethod
    def last_name(cls) -> str:
        return "Dumitrescu"

    @classmethod
    def phone(cls) -> str | None:
        return "0722123456"

    @classmethod
    def organization_name(cls) -> str:
        return f"Asociatia {uuid4().hex[:6]}"

    @classmethod
    def company_name(cls) -> str | None:
        return None

    @classmethod
    def subscription_plan(cls) -> str | None:
        return "Starter"
