import binascii
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from keyserver.application.key_server import KeyServer
from keyserver.domain.ports.notifier import NotifierPort
from keyserver.presentation.dependencies import get_key_server, get_notifier
from keyserver.schemas.requests import BeginDeleteIn, CommitPutIn, EmailIn
from keyserver.schemas.responses import AcceptedOut, ErrorOut, OkOut, PublicKeyOut

router = APIRouter(
    tags=["Keys"],
    responses={500: {"model": ErrorOut, "description": "Backend failure"}},
)

_INVALID = {400: {"model": ErrorOut, "description": "Invalid email"}}
_UNDELIVERED = {502: {"model": ErrorOut, "description": "Email delivery failed"}}
_NOT_FOUND = {404: {"model": ErrorOut, "description": "Unknown or expired"}}


@router.post(
    "/getKeys", response_model=list[PublicKeyOut], responses=_INVALID
)
async def post_get_keys(
    body: EmailIn,
    key_server: Annotated[KeyServer, Depends(get_key_server)],
):
    keys = await key_server.get_keys(body.email)
    return [PublicKeyOut.from_domain(k) for k in keys]


@router.post(
    "/beginPut",
    status_code=202,
    response_model=AcceptedOut,
    responses={**_INVALID, **_UNDELIVERED},
)
async def post_begin_put(
    body: EmailIn,
    key_server: Annotated[KeyServer, Depends(get_key_server)],
    notifier: Annotated[NotifierPort, Depends(get_notifier)],
):
    # the challenge only ever travels by email
    challenge = await key_server.begin_put(body.email)
    await notifier.send_challenge(body.email, challenge)
    return AcceptedOut()


@router.post(
    "/commitPut",
    response_model=OkOut,
    responses={
        400: {"model": ErrorOut, "description": "Signature rejected"},
        **_NOT_FOUND,
    },
)
async def post_commit_put(
    body: CommitPutIn,
    key_server: Annotated[KeyServer, Depends(get_key_server)],
):
    try:
        signature = body.signature_bytes()
    except (binascii.Error, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="signature decode failed"
        )
    await key_server.commit_put(body.challenge, signature, body.publickey.to_domain())
    return OkOut()


@router.post(
    "/beginDelete",
    status_code=202,
    response_model=AcceptedOut,
    responses={**_INVALID, **_UNDELIVERED},
)
async def post_begin_delete(
    body: BeginDeleteIn,
    key_server: Annotated[KeyServer, Depends(get_key_server)],
    notifier: Annotated[NotifierPort, Depends(get_notifier)],
):
    token = await key_server.begin_delete(body.email, body.publickey.to_domain())
    await notifier.send_token(body.email, token)
    return AcceptedOut()


# Opened from the link in the deletion email, hence GET with a query parameter.
@router.get("/commitDelete", response_model=OkOut, responses=_NOT_FOUND)
async def get_commit_delete(
    token: Annotated[str, Query(min_length=1)],
    key_server: Annotated[KeyServer, Depends(get_key_server)],
):
    await key_server.commit_delete(token)
    return OkOut()
