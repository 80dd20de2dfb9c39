"""
FastAPI transport for the mock server (in-memory).
"""

from typing import Any, Dict, List

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import MockError
from .kit import parse_kit
from .mock_server import MockServer

app = FastAPI(title="expectset mock server")
server = MockServer()


class DeclareSessionRequest(BaseModel):
    expectations: List[Dict[str, Any]]


class CallRequest(BaseModel):
    method: str
    args: List[Any] = []
    kwargs: Dict[str, Any] = {}


ERROR_STATUS = {
    "SESSION_NOT_FOUND": 404,
    "NO_MATCH": 409,
    "PARTIAL_MATCH": 409,
    "AMBIGUOUS_MATCH": 409,
    "UNMET_EXPECTATIONS": 409,
    "INVALID_KIT": 400,
}


@app.exception_handler(MockError)
async def _mock_error_handler(_, exc: MockError):
    status = ERROR_STATUS.get(exc.code, 400)
    return JSONResponse(
        status_code=status,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
            }
        },
    )


@app.post("/v1/sessions")
def declare_session(req: DeclareSessionRequest):
    kit = parse_kit({"expectations": req.expectations})
    session_id, steps = server.declare_session(kit)
    return {"session_id": session_id, "steps": steps}


@app.post("/v1/sessions/{session_id}/calls")
def call(session_id: str, req: CallRequest):
    value = server.call(session_id, req.method, req.args, req.kwargs)
    return {"value": value}


@app.get("/v1/sessions/{session_id}")
def describe(session_id: str):
    return {"expectations": server.describe(session_id)}


@app.get("/v1/sessions/{session_id}/history")
def history(session_id: str):
    return {
        "calls": [
            {"action": record.action, "matched": record.matched}
            for record in server.history(session_id)
        ]
    }


@app.post("/v1/sessions/{session_id}/finish")
def finish(session_id: str):
    server.finish(session_id)
    return {"finished": True}
