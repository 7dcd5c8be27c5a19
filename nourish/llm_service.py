from typing import Any, Protocol

from nourish.models import InlineImage


class GenerationError(Exception):
    """The remote model could not be reached or reported an error."""


class MissingImageError(Exception):
    """The image call came back without any inline image data."""


class GenerationClient(Protocol):
    async def generate_json(self, prompt: str, schema: dict[str, Any]) -> str:
        """Raw reply text for a prompt constrained by a JSON schema."""
        ...

    async def generate_image(self, prompt: str) -> InlineImage | None:
        """The first inline image in the reply, if there is one."""
        ...

    async def close(self) -> None:
        ...
