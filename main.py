import logging
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

from accounts import AccountDirectory
from database import DATABASE_NAME, connect, ensure_indexes, get_db
from errors import Conflict, InvalidInput, NotFound, StoreUnavailable, store_errors
from forms import FormStore
from schema_registry import SchemaRegistry
from schemas import AccountOut, FieldMap, FormIn, FormRecord, FormValuesIn, SignupRequest

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # a missing DATABASE_URL raises here and the server never starts serving
    client = connect()
    app.state.db = client[DATABASE_NAME]
    try:
        with store_errors("ensure_indexes"):
            ensure_indexes(app.state.db)
    except StoreUnavailable:
        # an unreachable store is reported per request, not at startup
        logger.warning("Store unreachable at startup, serving without index check")
    try:
        yield
    finally:
        client.close()
        logger.info("Closed MongoDB connection")


app = FastAPI(title="Farm Forms API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def get_accounts(db: Database = Depends(get_db)) -> AccountDirectory:
    return AccountDirectory(db)


def get_schema_registry(db: Database = Depends(get_db)) -> SchemaRegistry:
    return SchemaRegistry(db)


def get_form_store(db: Database = Depends(get_db)) -> FormStore:
    return FormStore(db)


@app.get("/")
def root():
    return {"message": "Farm Forms Backend Running"}


@app.post("/api/signup", status_code=201)
def signup(payload: SignupRequest, accounts: AccountDirectory = Depends(get_accounts)):
    try:
        accounts.create_account(payload.email, payload.password,
                                finca=payload.finca, owner=payload.owner, phone=payload.phone)
    except (InvalidInput, Conflict) as e:
        raise HTTPException(status_code=400, detail=e.message)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Failed to sign up user. Please try again.")
    return {"message": "User signed up successfully!"}


@app.get("/api/users/{email}/schema", response_model=FieldMap)
def read_schema(email: str, registry: SchemaRegistry = Depends(get_schema_registry)):
    try:
        return registry.get_schema(email)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Error fetching schema")


@app.put("/api/users/{email}/schema")
def update_schema(email: str, partial: FieldMap = Body(...),
                  registry: SchemaRegistry = Depends(get_schema_registry)):
    try:
        schema = registry.merge_schema(email, partial)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Error updating schema")
    return {"message": "Schema updated successfully", "schema": schema}


@app.get("/api/users", response_model=List[AccountOut])
def list_users(accounts: AccountDirectory = Depends(get_accounts)):
    try:
        return accounts.list_accounts()
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Error retrieving users.")


@app.delete("/api/users")
def delete_users(accounts: AccountDirectory = Depends(get_accounts)):
    try:
        count = accounts.purge_all()
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Failed to delete users. Please try again.")
    return {"message": f"Successfully deleted {count} users."}


@app.post("/api/users/{user_id}/forms", response_model=FormRecord)
def create_form(user_id: str, payload: FormIn, forms: FormStore = Depends(get_form_store)):
    try:
        return forms.create_form(user_id, payload.form_type, payload.values)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Error creating form")


@app.get("/api/users/{user_id}/forms/{form_id}", response_model=FormRecord)
def read_form(user_id: str, form_id: str, forms: FormStore = Depends(get_form_store)):
    try:
        return forms.get_form(form_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Error fetching form")


@app.put("/api/users/{user_id}/forms/{form_id}", response_model=Optional[FormRecord])
def update_form(user_id: str, form_id: str, payload: FormValuesIn,
                forms: FormStore = Depends(get_form_store)):
    # user_id is not checked against the form's owner
    try:
        return forms.update_form(form_id, payload.values)
    except NotFound:
        return None
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=e.message)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Error updating form")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
