# Load .env vars from file before everything else
from dotenv import load_dotenv

load_dotenv()

from .logger import setup_logging  # noqa: E402

setup_logging()

from .exceptions import NaisBuildError  # noqa: E402
from .image_name import ImageReference, ReleaseTarget, format_image_name  # noqa: E402
from .pipeline import Pipeline, Stage  # noqa: E402
from .sdk import SdkVariant, detect  # noqa: E402

__all__ = [
    "ImageReference",
    "NaisBuildError",
    "Pipeline",
    "ReleaseTarget",
    "SdkVariant",
    "Stage",
    "detect",
    "format_image_name",
]
