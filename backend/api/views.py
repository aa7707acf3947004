import logging
import math

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import LevelStatsSerializer, PlayersSerializer, SimulateSerializer, UploadSerializer
from analytics.features import derive_score_input
from analytics.formatting import format_time
from analytics.parser import parse_times_file
from analytics.scoring import (
    ScoreInput,
    rating_modifier,
    score_level,
)
from analytics.simulator import generate_players

logger = logging.getLogger(__name__)


def _json_number(value: float):
    # strict JSON has no NaN/inf; diagnostics can legitimately hold them
    return float(value) if math.isfinite(value) else None


def build_points_payload(score_input: ScoreInput) -> dict:
    """Result + the diagnostics the breakdown UI wants to show."""
    result, diagnostics = score_level(score_input)
    wr_time = score_input.top_times[0] if score_input.top_times else 0.0

    payload = result.to_dict()
    payload["competitiveness"] = {k: _json_number(v) for k, v in diagnostics.to_dict().items()}
    payload["rating_modifier"] = _json_number(rating_modifier(score_input.level_rating))
    payload["input"] = score_input.to_dict()
    payload["wr_display"] = format_time(wr_time) if score_input.top_times else "-"

    logger.info(
        "Computed %s points (wr=%s, pbs=%s, records=%s)",
        result.points,
        payload["wr_display"],
        score_input.personal_bests,
        score_input.total_records,
    )
    return payload


def _bad_request(errors) -> Response:
    logger.warning("Rejected level points request: %s", errors)
    return Response({"error": errors}, status=status.HTTP_400_BAD_REQUEST)


class LevelPointsAPIView(APIView):
    """Compute points from aggregate level stats."""

    def post(self, request):
        serializer = LevelStatsSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)

        score_input = ScoreInput(**serializer.validated_data)
        return Response(build_points_payload(score_input))


class PlayersPointsAPIView(APIView):
    """Derive stats from a list of players and their times, then compute points."""

    def post(self, request):
        serializer = PlayersSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)

        data = serializer.validated_data
        score_input = derive_score_input(data["players"], level_rating=data["level_rating"])
        return Response(build_points_payload(score_input))


class UploadTimesAPIView(APIView):
    """Upload a CSV/Excel of player times and compute points (nothing is stored)."""

    def post(self, request):
        serializer = UploadSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)

        try:
            df = parse_times_file(serializer.validated_data["file"])
        except ValueError as e:
            return _bad_request(str(e))

        score_input = derive_score_input(df, level_rating=serializer.validated_data["level_rating"])
        payload = build_points_payload(score_input)
        payload["rows"] = int(len(df))
        return Response(payload)


class SimulateAPIView(APIView):
    """Generate random players (optionally seeded) and compute points."""

    def get(self, request):
        serializer = SimulateSerializer(data=request.query_params)
        if not serializer.is_valid():
            return _bad_request(serializer.errors)

        params = serializer.validated_data
        players = generate_players(
            n_players=params["players"],
            times_per_player=params["times"],
            min_time=params["min_time"],
            max_time=params["max_time"],
            seed=params.get("seed"),
        )
        score_input = derive_score_input(players, level_rating=params["level_rating"])
        payload = build_points_payload(score_input)
        payload["players"] = [p.to_dict() for p in players]
        return Response(payload)
