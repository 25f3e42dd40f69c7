"""
Per-account dynamic schema: read and shallow merge.

merge_schema reads the account, merges in memory and writes the whole
`schema` field back. The two steps are separate round trips to the store, so
concurrent merges on the same account are last-write-wins and can drop keys.
Callers that need per-account atomicity serialize their merges upstream.
"""
import logging
from typing import Any, Dict

from pymongo.database import Database

from database import ACCOUNTS
from errors import NotFound, store_errors
from schemas import FieldMap

logger = logging.getLogger(__name__)


class SchemaRegistry:
    def __init__(self, db: Database):
        self.db = db

    def _load(self, email: str) -> Dict[str, Any]:
        with store_errors("load_schema"):
            account = self.db[ACCOUNTS].find_one({"email": email}, {"schema": 1})
        if account is None:
            raise NotFound("User not found")
        return account

    def get_schema(self, email: str) -> FieldMap:
        return self._load(email).get("schema") or {}

    def merge_schema(self, email: str, partial: FieldMap) -> FieldMap:
        account = self._load(email)
        schema = {**(account.get("schema") or {}), **partial}

        with store_errors("merge_schema"):
            result = self.db[ACCOUNTS].update_one({"_id": account["_id"]}, {"$set": {"schema": schema}})
        if result.matched_count == 0:
            # purged between the read and the write
            raise NotFound("User not found")

        logger.info("Merged %d field(s) into schema of %s", len(partial), email)
        return schema
