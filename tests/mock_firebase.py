from typing import Optional

from travelmap.core.firebase import FirebaseAdminProtocol


class MockFirebaseAdmin(FirebaseAdminProtocol):
    def __init__(self, delete_succeeds: bool = True):
        self.delete_succeeds = delete_succeeds
        self.deleted_blobs: list[str] = []

    async def get_uid_from_token(self, id_token: str) -> Optional[str]:
        return None

    async def get_uid_from_auth_header(self, authorization: Optional[str]) -> Optional[str]:
        return None

    async def delete_image(self, blob_name: str) -> bool:
        if self.delete_succeeds:
            self.deleted_blobs.append(blob_name)
        return self.delete_succeeds
