"""
Form store: typed form instances tied to an account id and a form type.

Updates replace the whole `values` mapping. Unlike schema merges, fields left
out of an update are dropped.
"""
import logging
from typing import Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from database import FORMS, create_document, object_id, utcnow, with_id
from errors import InvalidInput, NotFound, store_errors
from schemas import FieldMap, FormRecord

logger = logging.getLogger(__name__)


class FormStore:
    def __init__(self, db: Database):
        self.db = db

    def create_form(self, account_id: Optional[str], form_type: Optional[str],
                    values: Optional[FieldMap] = None) -> FormRecord:
        """Store a new form. The referenced account is not required to exist."""
        if not account_id:
            raise InvalidInput("userId is required.")
        if not form_type:
            raise InvalidInput("formType is required.")

        now = utcnow()
        form = FormRecord(account_id=account_id, form_type=form_type, values=values or {},
                          created_at=now, updated_at=now)
        with store_errors("create_form"):
            form.id = create_document(self.db, FORMS, form)

        logger.info("Created %s form %s for account %s", form_type, form.id, account_id)
        return form

    def get_form(self, form_id: str) -> FormRecord:
        oid = object_id(form_id)
        if oid is None:
            raise NotFound("Form not found")
        with store_errors("get_form"):
            doc = with_id(self.db[FORMS].find_one({"_id": oid}))
        if doc is None:
            raise NotFound("Form not found")
        return FormRecord.model_validate(doc)

    def update_form(self, form_id: str, new_values: FieldMap) -> FormRecord:
        """Replace the form's values with new_values and refresh updated_at."""
        oid = object_id(form_id)
        if oid is None:
            raise NotFound("Form not found")
        with store_errors("update_form"):
            doc = self.db[FORMS].find_one_and_update(
                {"_id": oid},
                {"$set": {"values": new_values, "updated_at": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFound("Form not found")

        logger.info("Replaced values of form %s", form_id)
        return FormRecord.model_validate(with_id(doc))
