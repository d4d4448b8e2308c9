"""Source-text composers for the generated Gatsby files."""

from gatsby_injector.composers.config import compose_config_file
from gatsby_injector.composers.hook import compose_hook_file

__all__ = ["compose_config_file", "compose_hook_file"]
