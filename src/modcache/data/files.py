"""The list of downloadable files for one mod."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Optional

from pydantic import BaseModel, Field

from modcache.data.cacheable import Cacheable
from modcache.data.keys import CompoundKey

if TYPE_CHECKING:
    from modcache.client.nexus import NexusClient


class FileInfo(BaseModel):
    file_id: int
    name: str = ""
    file_name: str = ""
    version: str = ""
    mod_version: str = ""
    category_id: int = 0
    category_name: Optional[str] = None
    is_primary: bool = False
    size: int = 0
    size_kb: int = 0
    size_in_bytes: Optional[int] = None
    uploaded_time: str = ""
    uploaded_timestamp: int = 0
    description: Optional[str] = None
    changelog_html: Optional[str] = None
    content_preview_link: Optional[str] = None
    external_virus_scan_url: Optional[str] = None


class FileUpdate(BaseModel):
    old_file_id: int
    new_file_id: int
    old_file_name: str = ""
    new_file_name: str = ""
    uploaded_timestamp: int = 0
    uploaded_time: str = ""


class Files(BaseModel, Cacheable[CompoundKey]):
    """Files and file-update history; the key is stamped on after fetching."""

    bucket_name: ClassVar[str] = "files"

    domain_name: str = ""
    mod_id: int = 0
    etag: str = ""
    files: list[FileInfo] = Field(default_factory=list)
    file_updates: list[FileUpdate] = Field(default_factory=list)

    def cache_key(self) -> CompoundKey:
        return CompoundKey(self.domain_name, self.mod_id)

    @classmethod
    def remote(
        cls, key: CompoundKey, nexus: NexusClient, etag: Optional[str]
    ) -> tuple[Optional[Files], str]:
        fetched, new_etag = nexus.files(key.domain_name, key.mod_id, etag)
        if fetched is not None:
            fetched.domain_name = key.domain_name
            fetched.mod_id = key.mod_id
        return fetched, new_etag

    def primary_file(self) -> Optional[FileInfo]:
        return next((f for f in self.files if f.is_primary), None)

    def file_by_id(self, file_id: int) -> Optional[FileInfo]:
        return next((f for f in self.files if f.file_id == file_id), None)
