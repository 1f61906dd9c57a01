"""Cached entity types and the read-through cache protocol.

Every entity mirrors one Nexus API resource and mixes in
:class:`~modcache.data.cacheable.Cacheable`, which supplies
``get``/``local``/``fetch_remote``/``store``/``update``:

=====================  ================  ==========================
Entity                 Bucket            Key
=====================  ================  ==========================
GameMetadata           games             domain slug
ModInfo                mods              ``{domain}/{mod_id}``
Tracked                mod_ref_lists     ``tracked``
EndorsementList        endorsements      ``endorsements``
Changelogs             changelogs        ``{domain}/{mod_id}``
Files                  files             ``{domain}/{mod_id}``
AuthenticatedUser      authed_users      ``authed_user``
=====================  ================  ==========================
"""

from modcache.data.cacheable import Cacheable
from modcache.data.changelogs import Changelogs
from modcache.data.endorsement import (
    EndorsementList,
    EndorsementStatus,
    EndorseResponse,
    UserEndorsement,
)
from modcache.data.files import FileInfo, Files, FileUpdate
from modcache.data.game import GameMetadata, ModCategory
from modcache.data.keys import CacheKey, CompoundKey, encode_key, game_prefix
from modcache.data.modinfo import (
    ModAuthor,
    ModEndorsement,
    ModInfo,
    ModInfoList,
    ModStatus,
    SortKey,
    sort_mods,
)
from modcache.data.tracked import ModReference, Tracked, TrackingResponse
from modcache.data.user import AuthenticatedUser

__all__ = [
    "AuthenticatedUser",
    "CacheKey",
    "Cacheable",
    "Changelogs",
    "CompoundKey",
    "EndorseResponse",
    "EndorsementList",
    "EndorsementStatus",
    "FileInfo",
    "FileUpdate",
    "Files",
    "GameMetadata",
    "ModAuthor",
    "ModCategory",
    "ModEndorsement",
    "ModInfo",
    "ModInfoList",
    "ModReference",
    "ModStatus",
    "SortKey",
    "Tracked",
    "TrackingResponse",
    "UserEndorsement",
    "encode_key",
    "game_prefix",
    "sort_mods",
]
