"""
Account directory: signup, lookup by email, listing and the admin purge.
"""
import logging
from typing import List, Optional

from passlib.context import CryptContext
from pymongo.database import Database

from database import ACCOUNTS, create_document, get_documents, utcnow, with_id
from errors import Conflict, InvalidInput, NotFound, store_errors
from schemas import Account, AccountOut

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_secret(secret: str) -> str:
    return pwd_context.hash(secret)


class AccountDirectory:
    def __init__(self, db: Database):
        self.db = db

    def create_account(self, email: Optional[str], credential_secret: Optional[str],
                       finca: Optional[str] = None, owner: Optional[str] = None,
                       phone: Optional[str] = None) -> AccountOut:
        """Register a new account with an empty schema.

        Raises InvalidInput when email or secret is missing, Conflict when the
        email is already registered. An existing account is never modified.
        """
        if not email or not credential_secret:
            raise InvalidInput("Email and password are required.")
        # stored as submitted, lookups by email compare the exact string
        account = Account(email=email, credential_hash=hash_secret(credential_secret),
                          finca=finca, owner=owner, phone=phone, created_at=utcnow())

        with store_errors("create_account"):
            if self.db[ACCOUNTS].find_one({"email": account.email}):
                raise Conflict("User already exists.")
            # the unique index still catches a signup racing this check
            account_id = create_document(self.db, ACCOUNTS, account.model_dump(by_alias=True))

        logger.info("Signed up account %s", account_id)
        return AccountOut(id=account_id, **account.model_dump(by_alias=True))

    def find_by_email(self, email: str) -> AccountOut:
        with store_errors("find_by_email"):
            doc = with_id(self.db[ACCOUNTS].find_one({"email": email}))
        if doc is None:
            raise NotFound("User not found")
        return AccountOut.model_validate(doc)

    def list_accounts(self) -> List[AccountOut]:
        with store_errors("list_accounts"):
            docs = get_documents(self.db, ACCOUNTS)
        return [AccountOut.model_validate(doc) for doc in docs]

    def purge_all(self) -> int:
        """Delete every account and return how many were removed.

        Forms referencing the deleted accounts are left untouched; callers
        needing referential cleanup do it themselves.
        """
        with store_errors("purge_all"):
            result = self.db[ACCOUNTS].delete_many({})
        logger.info("Deleted %d users.", result.deleted_count)
        return result.deleted_count
