"""Tests for the analysis service, HTTP API and CLI."""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api import get_analysis_service
from app.cli import main as cli_main
from app.clients import OkxApiError, OkxRestClient
from app.config import Settings
from app.main import app
from app.services import AnalysisResult, AnalysisService
from core.models import Kline

WAVE = [10, 11, 12, 11, 10, 9, 10, 11, 12, 13] * 3


def make_klines(closes, symbol="BTC-USDT", timeframe="1H"):
    ts = 1700000000000
    klines = []
    for close in closes:
        price = Decimal(str(close))
        klines.append(Kline(
            symbol=symbol,
            timeframe=timeframe,
            timestamp=ts,
            open=price,
            high=price,
            low=price,
            close=price,
            volume=Decimal("1"),
        ))
        ts += 3_600_000
    return klines


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def mock_client():
    """Create a mock OKX client."""
    client = MagicMock()
    client.get_candles = AsyncMock(return_value=make_klines(WAVE))
    client.close = AsyncMock()
    return client


@pytest.fixture
def service(mock_client, settings):
    return AnalysisService(mock_client, settings=settings)


class TestAnalysisService:
    """Tests for AnalysisService.execute."""

    @pytest.mark.asyncio
    async def test_signal_success(self, service, mock_client):
        result = await service.execute("signal", inst_id="BTC-USDT", bar="1H", limit=100)

        assert result.success is True
        assert result.error is None
        assert result.summary == "BTC-USDT composite score: 8/10, strong bullish"
        assert result.data["instId"] == "BTC-USDT"
        assert result.data["bar"] == "1H"
        assert result.data["score"] == 8
        assert result.data["maxScore"] == 10
        assert result.data["indicators"]["macdDif"] == 0.25
        assert result.data["recommendation"] == "strong bullish"
        assert "summary" not in result.data
        mock_client.get_candles.assert_awaited_once_with("BTC-USDT", "1H", 100)

    @pytest.mark.asyncio
    async def test_defaults_from_settings(self, service, mock_client):
        await service.execute("ma")

        mock_client.get_candles.assert_awaited_once_with("BTC-USDT", "1H", 100)

    @pytest.mark.asyncio
    async def test_limit_is_clamped(self, service, mock_client):
        await service.execute("rsi", limit=5000)

        mock_client.get_candles.assert_awaited_once_with("BTC-USDT", "1H", 300)

    @pytest.mark.asyncio
    async def test_unknown_action_fails_without_fetching(self, service, mock_client):
        result = await service.execute("bollinger")

        assert result.success is False
        assert result.error == "Unknown action: bollinger"
        assert result.data is None
        mock_client.get_candles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_timeframe_fails_without_fetching(self, service, mock_client):
        result = await service.execute("signal", bar="2H")

        assert result.success is False
        assert result.error == "Unsupported timeframe: 2H"
        mock_client.get_candles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upstream_error_code(self, service, mock_client):
        mock_client.get_candles.side_effect = OkxApiError("51001", "Instrument ID does not exist")

        result = await service.execute("signal", inst_id="NOPE-USDT")

        assert result.success is False
        assert result.error == "Instrument ID does not exist"

    @pytest.mark.asyncio
    async def test_network_error(self, service, mock_client):
        mock_client.get_candles.side_effect = httpx.ConnectError("connection refused")

        result = await service.execute("macd")

        assert result.success is False
        assert result.error == "connection refused"
        assert mock_client.get_candles.await_count == 1

    @pytest.mark.asyncio
    async def test_empty_candles_is_not_an_error(self, service, mock_client):
        mock_client.get_candles.return_value = []

        result = await service.execute("ma")

        assert result.success is True
        assert result.data["price"] is None
        assert result.data["trend"] == "ranging"

    @pytest.mark.asyncio
    async def test_kline_action(self, service):
        result = await service.execute("kline")

        assert result.success is True
        assert result.data["count"] == 30
        assert result.data["latest"]["close"] == 13.0
        assert len(result.data["klines"]) == 10
        assert result.data["latest"]["open_time"].startswith("2023-11-16T03:13:20")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json=["code", "0"]),
            httpx.Response(200, json={"code": "0", "data": [["1700000000000", "0", "0", "0", "0", "0"]]}),
        ],
        ids=["not-json", "not-an-object", "zero-price"],
    )
    async def test_malformed_upstream_is_a_failure_result(self, response, settings):
        client = OkxRestClient(
            base_url="https://okx.test",
            calls_per_minute=60_000,
            transport=httpx.MockTransport(lambda request: response),
        )
        service = AnalysisService(client, settings=settings)
        try:
            result = await service.execute("signal")
        finally:
            await client.close()

        assert result.success is False
        assert result.data is None
        assert result.error.startswith("Malformed")


class TestApi:
    """Tests for the FastAPI routes."""

    @pytest.fixture
    def http(self, service):
        with TestClient(app) as client:
            app.dependency_overrides[get_analysis_service] = lambda: service
            yield client
        app.dependency_overrides.clear()

    def test_health(self, http):
        response = http.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "signal" in body["actions"]
        assert "4H" in body["timeframes"]

    def test_analysis_endpoint(self, http, mock_client):
        response = http.get("/api/analysis/signal", params={"instId": "ETH-USDT", "bar": "4H", "limit": 50})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["instId"] == "ETH-USDT"
        assert body["data"]["reasons"][0] == "价格>MA5"
        mock_client.get_candles.assert_awaited_once_with("ETH-USDT", "4H", 50)

    def test_unknown_action_is_a_failure_result(self, http):
        response = http.get("/api/analysis/unknown")

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "data": None,
            "summary": None,
            "error": "Unknown action: unknown",
        }

    def test_invalid_limit_rejected(self, http):
        response = http.get("/api/analysis/signal", params={"limit": 0})

        assert response.status_code == 422


class TestCli:
    """Tests for the okx-analysis command."""

    def test_prints_summary(self, capsys):
        result = AnalysisResult(
            success=True,
            data={"reasons": ["价格>MA5", "MACD金叉"]},
            summary="BTC-USDT composite score: 2/10, neutral",
        )
        with patch.object(AnalysisService, "execute", AsyncMock(return_value=result)) as execute:
            code = cli_main(["signal", "--inst-id", "BTC-USDT", "--bar", "15m", "--limit", "50"])

        assert code == 0
        execute.assert_awaited_once_with("signal", inst_id="BTC-USDT", bar="15m", limit=50)
        out = capsys.readouterr().out
        assert "BTC-USDT composite score: 2/10, neutral" in out
        assert "价格>MA5, MACD金叉" in out

    def test_json_output(self, capsys):
        result = AnalysisResult(success=True, data={"rsi": 55.0}, summary="ok")
        with patch.object(AnalysisService, "execute", AsyncMock(return_value=result)):
            code = cli_main(["rsi", "--json"])

        assert code == 0
        assert json.loads(capsys.readouterr().out)["data"] == {"rsi": 55.0}

    def test_failure_exit_code(self, capsys):
        result = AnalysisResult.failure("Instrument ID does not exist")
        with patch.object(AnalysisService, "execute", AsyncMock(return_value=result)):
            code = cli_main(["signal", "--inst-id", "NOPE-USDT"])

        assert code == 1
        assert "Instrument ID does not exist" in capsys.readouterr().err

    def test_logging_format_matches_server(self):
        result = AnalysisResult(success=True, data={}, summary="ok")
        with patch.object(AnalysisService, "execute", AsyncMock(return_value=result)), \
                patch("app.cli.logging.basicConfig") as basic_config:
            cli_main(["ma"])

        assert basic_config.call_args.kwargs["format"] == "%(asctime)s - %(levelname)s - %(message)s"
