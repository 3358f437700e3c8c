# pylint: disable=unused-import,wildcard-import
from tests.fixtures.app_fixtures import *  # noqa: F401,F403
from tests.fixtures.s3_fixtures import *  # noqa: F401,F403
