from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.results import InsertOneResult

from settings import MONGO_URI, DATABASE_NAME

# MongoClient connects lazily and is safe to share across request threads
client = MongoClient(MONGO_URI)
db = client[DATABASE_NAME]


def get_db() -> Database:
    return db


def create_document(
    database: Database,
    collection_name: str,
    data: Union[BaseModel, Dict[str, Any]],
    exclude_none: bool = True,
) -> InsertOneResult:
    if isinstance(data, BaseModel):
        doc = data.model_dump(exclude_none=exclude_none)
    elif exclude_none:
        doc = {k: v for k, v in data.items() if v is not None}
    else:
        doc = dict(data)
    return database[collection_name].insert_one(doc)


def get_documents(
    database: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    projection: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    return list(database[collection_name].find(filter_dict or {}, projection))
