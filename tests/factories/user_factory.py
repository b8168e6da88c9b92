"""
User factories for testing.
Uses Factory Boy to generate realistic test data with Faker.
"""
import factory
from factory import Faker, LazyFunction

from pizza_auth.core.security import SecurityService, pwd_context
from pizza_auth.models.user import UserRecord


DEFAULT_PASSWORD = "TestPassword123!"


class UserFactory(factory.Factory):
    """Factory for UserRecord."""

    class Meta:
        model = UserRecord

    id = LazyFunction(SecurityService.generate_user_id)
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = Faker("name")
    password_hash = LazyFunction(lambda: pwd_context.hash(DEFAULT_PASSWORD))
    email_verified = False
    verification_token = LazyFunction(SecurityService.generate_token)

    class Params:
        verified = factory.Trait(
            email_verified=True,
            verification_token=None
        )


class SignUpPayloadFactory(factory.DictFactory):
    """JSON body for POST /auth/signup."""

    name = "Pizza Fan"
    email = factory.Sequence(lambda n: f"signup{n}@example.com")
    password = DEFAULT_PASSWORD
    confirm_password = DEFAULT_PASSWORD
