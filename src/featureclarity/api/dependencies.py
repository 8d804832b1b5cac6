from fastapi import Depends, Request

from ..analyze.analysis_gateway import AnalysisGateway
from ..analyze.extraction_gateway import ExtractionGateway
from ..analyze.llm import LLMClient
from ..config import ClarityConfig, get_settings
from ..logging import ClarityLogger


def get_request_logger(request: Request) -> ClarityLogger:
    logger = getattr(request.state, "logger", None)
    if logger is None:
        logger = ClarityLogger(getattr(request.state, "request_id", "unknown"))
    return logger


def get_llm_client(settings: ClarityConfig = Depends(get_settings)) -> LLMClient:
    return LLMClient.from_config(settings)


def get_extraction_gateway(
    client: LLMClient = Depends(get_llm_client),
    logger: ClarityLogger = Depends(get_request_logger),
) -> ExtractionGateway:
    return ExtractionGateway(client, logger=logger)


def get_analysis_gateway(
    client: LLMClient = Depends(get_llm_client),
    logger: ClarityLogger = Depends(get_request_logger),
    settings: ClarityConfig = Depends(get_settings),
) -> AnalysisGateway:
    return AnalysisGateway(client, logger=logger, temperature=settings.analysis_temperature)
