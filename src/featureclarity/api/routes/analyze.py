from fastapi import APIRouter, Depends, HTTPException

from ...analyze.analysis_gateway import AnalysisGateway
from ...analyze.schema_contract import SchemaContract
from ...models import AnalysisInput
from ..dependencies import get_analysis_gateway
from ..schemas import AnalyzeRequest, ErrorResponse

router = APIRouter()


def get_schema_contract() -> SchemaContract:
    return SchemaContract()


@router.post(
    "/analyze",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze(
    payload: AnalyzeRequest,
    gateway: AnalysisGateway = Depends(get_analysis_gateway),
    contract: SchemaContract = Depends(get_schema_contract),
):
    """
    Analyze a feature description and return the validated AnalysisResult.

    Contract failures come back as 500 with the raw model output in rawResponse.
    """
    if not payload.feature_text or not payload.feature_text.strip():
        raise HTTPException(status_code=400, detail="Missing featureText")

    raw = await gateway.analyze(
        AnalysisInput(
            combined_feature_text=payload.feature_text,
            title=payload.title or "",
            context=payload.context or "",
            clarification_notes=payload.clarification_notes or None,
        )
    )
    result = contract.parse(raw)
    return contract.dump(result)
