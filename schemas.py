"""
Database Schemas for the farm forms API

Each collection model below describes a document in MongoDB:
- Account -> "accounts" collection
- FormRecord -> "forms" collection

Stored documents use snake_case keys. Models returned over HTTP serialize
with camelCase aliases.

Field values inside an account schema or a form are dynamic: any JSON value
(string, number, bool, null, list or nested mapping), typed as pydantic's
JsonValue.
"""
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue
from pydantic.alias_generators import to_camel

FieldMap = Dict[str, JsonValue]


class Account(BaseModel):
    """
    Accounts collection schema
    One schema mapping per account. Field names are scoped to the account,
    two accounts may define the same field independently.
    """
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., description="Email address as submitted (unique)")
    credential_hash: str = Field(..., description="One-way hash of the signup password")
    finca: Optional[str] = Field(None, description="Farm name")
    owner: Optional[str] = Field(None, description="Farm owner")
    phone: Optional[str] = Field(None, description="Contact phone")
    schema_fields: FieldMap = Field(default_factory=dict, alias="schema",
                                    description="Tenant-defined field mapping")
    created_at: datetime


class AccountOut(BaseModel):
    """Account as listed by the API. The credential hash never leaves the store."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: str
    email: str
    finca: Optional[str] = None
    owner: Optional[str] = None
    phone: Optional[str] = None
    schema_fields: FieldMap = Field(default_factory=dict, alias="schema")
    created_at: Optional[datetime] = None


class FormRecord(BaseModel):
    """
    Forms collection schema
    account_id is a weak reference: deleting the account leaves the form in place.
    """
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: Optional[str] = None
    account_id: str = Field(..., alias="userId", description="Id of the owning account (not enforced)")
    form_type: str = Field(..., description="Form category, e.g. 'fitosanitarios', 'comite'")
    values: FieldMap = Field(default_factory=dict, description="Dynamic form values")
    created_at: datetime
    updated_at: datetime


class SignupRequest(BaseModel):
    # presence is checked by the account directory so a missing field answers 400, not 422
    email: Optional[str] = None
    password: Optional[str] = None
    finca: Optional[str] = None
    owner: Optional[str] = None
    phone: Optional[str] = None


class FormIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    form_type: Optional[str] = None
    values: Optional[FieldMap] = None


class FormValuesIn(BaseModel):
    values: FieldMap
