import pytest

from objvalidator.config import Settings
from objvalidator.validators.engine import Validator


@pytest.fixture
def settings() -> Settings:
    return Settings(DETECT_CYCLES=True, CACHE_METADATA=True)


@pytest.fixture
def validator(settings) -> Validator:
    return Validator(settings=settings)
