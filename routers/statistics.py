# filename: routers/statistics.py

from fastapi import APIRouter, Body, Depends, Path, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from authentication import AuthHandler, TokenPayload
from exceptions import ResourceNotFoundException
from logging_config import logger
from models.statistics import (
    AdvancedSeasonStatistics,
    PlayerStatistics,
    SeasonStatisticsSummary,
    StatisticsCalculateRequest,
    StatisticsCalculateResponse,
    TeamStatisticsSummary,
)
from services.advanced_stats_service import AdvancedStatsService
from services.stats_service import StatsService

router = APIRouter()
auth = AuthHandler()


# recalculate statistics
@router.post(
    "/calculate",
    response_description="Recalculate player, team and season statistics",
    response_model=StatisticsCalculateResponse,
)
async def calculate_statistics(
    request: Request,
    calculate_request: StatisticsCalculateRequest | None = Body(
        default=None,
        description="Optional season and/or player to restrict the run to",
    ),
    token_payload: TokenPayload = Depends(auth.admin_wrapper),
) -> JSONResponse:
    calculate_request = calculate_request or StatisticsCalculateRequest()
    stats_service = StatsService(request.app.state.mongodb)
    logger.info(
        "Statistics recalculation requested",
        extra={
            "requested_by": token_payload.sub,
            "season_id": calculate_request.seasonId,
            "player_id": calculate_request.playerId,
        },
    )
    result = await stats_service.recalculate(
        season_id=calculate_request.seasonId, player_id=calculate_request.playerId
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK, content=jsonable_encoder(result, exclude_none=True)
    )


# get statistics of one player
@router.get(
    "/players/{player_id}",
    response_description="Get statistics of a player (all seasons and career)",
    response_model=PlayerStatistics,
)
async def get_player_statistics(
    request: Request,
    player_id: str = Path(..., description="The ID of the player"),
    token_payload: TokenPayload = Depends(auth.admin_wrapper),
) -> JSONResponse:
    stats_service = StatsService(request.app.state.mongodb)
    try:
        statistics = await stats_service.get_player_statistics(player_id)
    except ResourceNotFoundException:
        # not calculated yet, build them for this player only
        logger.info(f"No statistics cached for player {player_id}, calculating")
        await stats_service.recalculate(player_id=player_id)
        statistics = await stats_service.get_player_statistics(player_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(statistics))


# get statistics of one team in a season
@router.get(
    "/teams/{season_id}/{team_name}",
    response_description="Get statistics of a team in a season",
    response_model=TeamStatisticsSummary,
)
async def get_team_statistics(
    request: Request,
    season_id: str = Path(..., description="The ID of the season"),
    team_name: str = Path(..., description="The name of the team"),
    token_payload: TokenPayload = Depends(auth.admin_wrapper),
) -> JSONResponse:
    stats_service = StatsService(request.app.state.mongodb)
    statistics = await stats_service.get_team_statistics(team_name, season_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(statistics))


# get statistics of a season
@router.get(
    "/seasons/{season_id}",
    response_description="Get statistics of a season (all teams aggregated)",
    response_model=SeasonStatisticsSummary,
)
async def get_season_statistics(
    request: Request,
    season_id: str = Path(..., description="The ID of the season"),
    token_payload: TokenPayload = Depends(auth.admin_wrapper),
) -> JSONResponse:
    stats_service = StatsService(request.app.state.mongodb)
    statistics = await stats_service.get_season_statistics(season_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(statistics))


# get advanced statistics of a season
@router.get(
    "/seasons/{season_id}/advanced",
    response_description="Get advanced statistics of a season",
    response_model=AdvancedSeasonStatistics,
)
async def get_advanced_season_statistics(
    request: Request,
    season_id: str = Path(..., description="The ID of the season"),
    token_payload: TokenPayload = Depends(auth.admin_wrapper),
) -> JSONResponse:
    advanced_service = AdvancedStatsService(StatsService(request.app.state.mongodb))
    statistics = await advanced_service.get_advanced_statistics(season_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=jsonable_encoder(statistics))
