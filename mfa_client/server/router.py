# (c) Copyright Datacraft, 2026
"""Verification gateway API endpoints."""
import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response, status

from mfa_client import schema
from mfa_client.errors import GatewayRejection
from mfa_client.gateway.local import LocalVerificationGateway

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mfa", tags=["MFA"])


def get_gateway(request: Request) -> LocalVerificationGateway:
	return request.app.state.gateway


@router.get("/enrollment", response_model=schema.EnrollmentStatusResponse)
async def get_enrollment_status(
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> schema.EnrollmentStatusResponse:
	"""Whether the current identity has a registered authenticator."""
	registered = await gateway.check_enrollment()
	return schema.EnrollmentStatusResponse(registered=registered)


@router.post("/enrollment/challenge", response_model=schema.ChallengeResponse)
async def initiate_challenge(
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> schema.ChallengeResponse:
	"""Issue a new enrollment challenge."""
	return await gateway.initiate_challenge()


@router.post("/enrollment/verify", response_model=schema.VerificationResult)
async def submit_verification(
	request: schema.SubmitVerificationRequest,
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> schema.VerificationResult:
	"""Confirm a pending challenge."""
	return await gateway.submit_verification(request.challenge_id, request.code)


@router.delete("/enrollment", response_model=schema.RevokeResponse)
async def revoke_enrollment(
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> schema.RevokeResponse:
	"""Remove the registered authenticator."""
	removed = await gateway.revoke_enrollment()
	return schema.RevokeResponse(removed=removed)


@router.delete(
	"/enrollment/challenge/{challenge_id}",
	status_code=status.HTTP_204_NO_CONTENT,
)
async def abandon_challenge(
	challenge_id: str,
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> Response:
	"""Drop a challenge that will not be confirmed."""
	await gateway.abandon_challenge(challenge_id)
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/authenticator/verify", response_model=schema.VerificationResult)
async def verify_authenticator_code(
	request: schema.AuthenticatorCodeRequest,
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> schema.VerificationResult:
	"""Verify a code from the registered authenticator."""
	return await gateway.verify_authenticator_code(request.code)


@router.post("/phone/send", status_code=status.HTTP_204_NO_CONTENT)
async def send_code(
	request: schema.SendCodeRequest,
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> Response:
	"""Send a one-time code to a phone number."""
	try:
		await gateway.send_code(request.destination)
	except GatewayRejection as e:
		raise HTTPException(
			status_code=e.status_code or status.HTTP_502_BAD_GATEWAY,
			detail=str(e),
		)

	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/phone/verify", response_model=schema.CodeCheckResponse)
async def verify_code(
	request: schema.VerifyCodeRequest,
	gateway: LocalVerificationGateway = Depends(get_gateway),
) -> schema.CodeCheckResponse:
	"""Check a code sent to a phone number."""
	valid = await gateway.verify_code(request.destination, request.code)
	return schema.CodeCheckResponse(valid=valid)


def create_app(gateway: LocalVerificationGateway | None = None) -> FastAPI:
	app = FastAPI(title="MFA verification gateway")
	app.state.gateway = gateway or LocalVerificationGateway()
	app.include_router(router)
	logger.info("Verification gateway app created")
	return app
