# SPDX-License-Identifier: MIT
"""
HTTP service exposing scan and recheck.

Run with any ASGI server, e.g. ``uvicorn leakwatch.server:app``. The config
file is taken from ``LEAKWATCH_CONFIG`` or the usual search order.
"""
from __future__ import annotations

import os
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from .core.exceptions import LeakwatchConfigError, StoreError
from .core.store import FindingsStore, JsonFindingsStore
from .detectors import DETECTORS, DetectorContext
from .recheck import RecheckEngine
from .scanner import Scanner, load_scanner_config
from .validate.core import ValidatorSettings

app = FastAPI(title="leakwatch")


class ScanRequest(BaseModel):
    content: str
    url: str
    store: bool = True


class RecheckRequest(BaseModel):
    fingerprint: Optional[str] = None


def get_config() -> Dict[str, Any]:
    try:
        return load_scanner_config(os.environ.get("LEAKWATCH_CONFIG"))
    except LeakwatchConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))


def get_store(config: Dict[str, Any] = Depends(get_config)) -> FindingsStore:
    return JsonFindingsStore(config["store_path"])


async def get_client():
    async with httpx.AsyncClient() as client:
        yield client


@app.get("/health")
def health():
    return {"ok": True, "service": "leakwatch"}


@app.get("/detectors")
def detectors():
    return {"ok": True, "detectors": list(DETECTORS)}


@app.post("/scan")
async def scan(
    req: ScanRequest,
    config: Dict[str, Any] = Depends(get_config),
    store: FindingsStore = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_client),
):
    scanner = Scanner.from_config(config, store=store, client=client)
    try:
        result = await (scanner.scan_and_store if req.store else scanner.run)(req.content, req.url)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    payload = result.to_dict()
    return {"ok": True, "findings": payload["findings"], "errors": payload["errors"]}


@app.post("/recheck")
async def recheck(
    req: RecheckRequest,
    config: Dict[str, Any] = Depends(get_config),
    store: FindingsStore = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_client),
):
    context = DetectorContext(store=store, settings=ValidatorSettings.from_config(config), client=client)
    engine = RecheckEngine(store, context)
    try:
        if req.fingerprint:
            results = {req.fingerprint: await engine.recheck_fingerprint(req.fingerprint)}
        else:
            results = await engine.recheck_all()
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown fingerprint: {req.fingerprint}")
    except StoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"ok": True, "results": results}
