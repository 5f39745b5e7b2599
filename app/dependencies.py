"""
Dependency providers for the routers.

The store and classifier live on ``app.state`` for the whole application
session; tests swap them through ``app.dependency_overrides``.
"""
from fastapi import Request

from app.utils.classifier import EntryClassifier
from app.utils.ledger import LedgerStore


def get_store(request: Request) -> LedgerStore:
    return request.app.state.store


def get_classifier(request: Request) -> EntryClassifier:
    return request.app.state.classifier
