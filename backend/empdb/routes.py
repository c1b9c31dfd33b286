# backend/empdb/routes.py
from fastapi import APIRouter, Query
from pydantic import BaseModel, Field
from typing import List, Optional

from empdb import config
from empdb.config import resolve_db_path
from empdb.storage.database_file import DatabaseFile
from empdb.io_counters import reset_counters, get_counters, timed

router = APIRouter()


class CreateDatabaseRequest(BaseModel):
    path: Optional[str] = Field(None, description="Database file; relative paths live under the data dir")

class AddEmployeeRequest(BaseModel):
    path: Optional[str] = None
    text: str = Field(..., description="name,address,hours", examples=["Ann,1 Oak Rd,40"])
    atomic: bool = Field(False, description="Persist through a temporary file and rename")

class HeaderOut(BaseModel):
    magic: int
    version: int
    count: int
    filesize: int

class EmployeeOut(BaseModel):
    name: str
    address: str
    hours: int

class AddEmployeeResponse(BaseModel):
    employee: EmployeeOut
    header: HeaderOut
    elapsed_ms: float
    metrics: dict


# Helpers
def _open_for_read(path: Optional[str]) -> DatabaseFile:
    return DatabaseFile.open_existing(resolve_db_path(path), read_only=True,
                                      lock_timeout=config.LOCK_TIMEOUT)


# Endpoints
@router.post("/databases", response_model=HeaderOut, status_code=201)
def create_database(req: CreateDatabaseRequest):
    path = resolve_db_path(req.path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with DatabaseFile.create_new(path) as db:
        return db.header.to_dict()


@router.get("/databases/header", response_model=HeaderOut)
def read_header(path: Optional[str] = Query(None)):
    with _open_for_read(path) as db:
        return db.header.to_dict()


@router.get("/employees", response_model=List[EmployeeOut])
def list_employees(path: Optional[str] = Query(None)):
    with _open_for_read(path) as db:
        return [r.to_dict() for r in db.store.list_all()]


@router.post("/employees", response_model=AddEmployeeResponse, status_code=201)
def add_employee(req: AddEmployeeRequest):
    reset_counters()
    with timed() as io, DatabaseFile.open_existing(resolve_db_path(req.path)) as db:
        rec = db.add_employee(req.text)
        db.persist(atomic=req.atomic)
        header = db.header.to_dict()
    return {
        "employee": rec.to_dict(),
        "header": header,
        "elapsed_ms": round(io.total_time_ms, 2),
        "metrics": get_counters(),
    }


@router.get("/metrics")
def metrics():
    return get_counters()
