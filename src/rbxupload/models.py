"""Public data models for rbxupload.

Plain dataclasses and enums describing what is uploaded (metadata and
creator), what comes back (:class:`UploadResult`), and the per-call
states of the protocol driver.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

MAX_CREATOR_ID = 2**64 - 1

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CreatorType(str, Enum):
    """Kind of account that will own the uploaded asset."""

    USER = "User"
    GROUP = "Group"

    @classmethod
    def parse(cls, value: str) -> CreatorType:
        """Parse ``user``/``User``/``group``/``Group``.

        Raises
        ------
        ValueError
            For any other spelling.
        """
        for member in cls:
            if value in (member.value, member.value.lower()):
                return member
        raise ValueError(
            f"Invalid creator type {value!r}; must be 'user' or 'group'"
        )


class DriverState(str, Enum):
    """States a single protocol call moves through."""

    IDLE = "idle"
    """Nothing sent yet."""

    CREATING = "creating"
    """Cloud flow: the create request is in flight."""

    POLLING = "polling"
    """Cloud flow: waiting on the background processing operation."""

    ENSURING_CSRF = "ensuring_csrf"
    """Session flow: obtaining or refreshing the CSRF token."""

    UPLOADING = "uploading"
    """Session flow: the upload request is in flight."""

    RETRYING_MODERATION = "retrying_moderation"
    """Session flow: sleeping before another attempt after a moderation
    verdict."""

    DONE = "done"
    """An asset id was obtained."""

    FAILED = "failed"
    """The call ended with an error."""


# ---------------------------------------------------------------------------
# Upload inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Creator:
    """The user or group that will own the asset.

    Attributes
    ----------
    creator_type:
        :attr:`CreatorType.USER` or :attr:`CreatorType.GROUP`.
    creator_id:
        Positive 64-bit id of the account or group.
    """

    creator_type: CreatorType
    creator_id: int

    def __post_init__(self) -> None:
        if isinstance(self.creator_id, bool) or not isinstance(self.creator_id, int):
            raise TypeError(f"creator_id must be int, got {type(self.creator_id).__name__}")
        if not 0 < self.creator_id <= MAX_CREATOR_ID:
            raise ValueError(
                f"creator_id must be between 1 and {MAX_CREATOR_ID}, got {self.creator_id}"
            )

    @classmethod
    def user(cls, user_id: int) -> Creator:
        return cls(CreatorType.USER, user_id)

    @classmethod
    def group(cls, group_id: int) -> Creator:
        return cls(CreatorType.GROUP, group_id)

    @classmethod
    def from_cli(cls, creator_type: str | CreatorType, creator_id: int) -> Creator:
        if not isinstance(creator_type, CreatorType):
            creator_type = CreatorType.parse(creator_type)
        return cls(creator_type, creator_id)

    @property
    def is_group(self) -> bool:
        return self.creator_type is CreatorType.GROUP


@dataclass(frozen=True)
class UploadMetadata:
    """Caller-supplied description of the asset.

    Attributes
    ----------
    name:
        Display name; must not be empty.
    description:
        Free text, possibly empty.
    creator:
        Owner of the new asset.
    """

    name: str
    description: str
    creator: Creator

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name must not be empty")


@dataclass(frozen=True)
class UploadImageOptions:
    """Validated options for one ``upload-image`` invocation.

    ``api_key`` and ``cookie`` are plain strings here; the credential
    resolver wraps whichever one it picks.
    """

    path: Path
    name: str
    description: str
    creator: Creator
    api_key: str | None = None
    cookie: str | None = None
    retry_moderation: bool = False

    def __repr__(self) -> str:
        key = "'****'" if self.api_key is not None else "None"
        cookie = "'****'" if self.cookie is not None else "None"
        return (
            f"UploadImageOptions(path={self.path!r}, name={self.name!r}, "
            f"description={self.description!r}, creator={self.creator!r}, "
            f"api_key={key}, cookie={cookie}, retry_moderation={self.retry_moderation!r})"
        )

    @property
    def metadata(self) -> UploadMetadata:
        return UploadMetadata(
            name=self.name,
            description=self.description,
            creator=self.creator,
        )


# ---------------------------------------------------------------------------
# Upload results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload.

    Attributes
    ----------
    asset_id:
        Positive id issued by the service.
    asset_version_number:
        Version of the asset, reported by the cloud flow only.
    """

    asset_id: int
    asset_version_number: int | None = None

    @property
    def asset_uri(self) -> str:
        return f"rbxassetid://{self.asset_id}"
