"""
Tests for the CLI and the block-driven run loop
"""

import logging
from unittest.mock import AsyncMock, Mock, patch

import pytest

from conftest import CHEAP, NOW, RICH, ROUTER
from fy_arbitrage.config_loader import NetworkConfig, RuntimeConfig, StrategyConfig
from fy_arbitrage.connectors import PaperExecutionSink, RouterExecutionSink, StaticBlockFeed
from fy_arbitrage.curve import DiscountCurve
from fy_arbitrage.exceptions import ConfigurationError
from fy_arbitrage.runner import build_components, main, parse_args, run_strategy
from fy_arbitrage.strategy import FYArbStrategy
from fy_arbitrage.types import NewBlockEvent


def blocks(*numbers):
    return StaticBlockFeed([NewBlockEvent(n, NOW) for n in numbers])


def runtime_config(rpc_url="http://localhost:8545"):
    return RuntimeConfig(
        strategy=StrategyConfig(router_id=ROUTER, pool_ids=(CHEAP, RICH)),
        curve=DiscountCurve.default_usd(),
        network=NetworkConfig(rpc_url=rpc_url),
    )


class TestRunStrategy:
    """Feed -> strategy -> sink"""

    @pytest.mark.asyncio
    async def test_submits_emitted_instructions(self, strategy_config, curve, simulated_pools):
        strategy = FYArbStrategy(strategy_config, curve, simulated_pools)
        sink = PaperExecutionSink()

        submitted = await run_strategy(strategy, blocks(1, 1, 2), sink)

        # Block 1 trades, its duplicate is skipped, block 2 trades again
        assert submitted == 2
        assert [i.block_number for i in sink.submitted] == [1, 2]

    @pytest.mark.asyncio
    async def test_max_blocks(self, strategy_config, curve, simulated_pools):
        strategy = FYArbStrategy(strategy_config, curve, simulated_pools)
        sink = PaperExecutionSink()

        await run_strategy(strategy, blocks(1, 2, 3), sink, max_blocks=1)

        assert strategy.last_block == 1

    @pytest.mark.asyncio
    async def test_failed_cycle_does_not_stop_loop(self, caplog):
        strategy = Mock()
        strategy.process_event = AsyncMock(side_effect=[RuntimeError("boom"), ["instr"]])
        sink = Mock()
        sink.submit = AsyncMock()

        with caplog.at_level(logging.ERROR):
            submitted = await run_strategy(strategy, blocks(1, 2), sink)

        assert submitted == 1
        sink.submit.assert_awaited_once_with("instr")
        assert "Cycle for block 1 failed" in caplog.text


class TestBuildComponents:
    """Wiring from runtime config"""

    def test_requires_rpc_url(self):
        with pytest.raises(ConfigurationError, match="No RPC URL"):
            build_components(runtime_config(rpc_url=None), paper=True)

    @patch("fy_arbitrage.runner.Web3")
    def test_paper_wiring(self, mock_web3_cls):
        mock_web3_cls.return_value.is_connected.return_value = True
        mock_web3_cls.is_address.return_value = True
        mock_web3_cls.to_checksum_address.side_effect = lambda a: a

        strategy, feed, sink = build_components(runtime_config(), paper=True, max_blocks=1)

        assert isinstance(sink, PaperExecutionSink)
        assert set(strategy.connectors) == {CHEAP, RICH}
        assert feed.max_blocks == 1

    @patch("fy_arbitrage.runner.Web3")
    def test_unreachable_node(self, mock_web3_cls):
        mock_web3_cls.return_value.is_connected.return_value = False

        with pytest.raises(ConnectionError):
            build_components(runtime_config(), paper=True)

    @patch("fy_arbitrage.runner.Web3")
    def test_live_requires_private_key(self, mock_web3_cls, monkeypatch):
        mock_web3_cls.return_value.is_connected.return_value = True
        mock_web3_cls.is_address.return_value = True
        mock_web3_cls.to_checksum_address.side_effect = lambda a: a
        monkeypatch.delenv("PRIVATE_KEY", raising=False)

        with pytest.raises(ConfigurationError, match="PRIVATE_KEY"):
            build_components(runtime_config(), paper=False)

    @patch("fy_arbitrage.runner.Web3")
    def test_live_wiring(self, mock_web3_cls, monkeypatch):
        mock_web3_cls.return_value.is_connected.return_value = True
        mock_web3_cls.is_address.return_value = True
        mock_web3_cls.to_checksum_address.side_effect = lambda a: a
        monkeypatch.setenv("PRIVATE_KEY", "0x" + "11" * 32)

        _, _, sink = build_components(runtime_config(), paper=False)

        assert isinstance(sink, RouterExecutionSink)


class TestCli:
    """Argument parsing and exit codes"""

    def test_parse_args(self):
        args = parse_args(
            ["--config", "c.yaml", "--paper", "--once", "--metrics-port", "9100"]
        )
        assert args.config == "c.yaml"
        assert args.paper is True
        assert args.once is True
        assert args.metrics_port == 9100
        assert args.log_level == "INFO"
        assert args.rpc_url is None

    def test_parse_args_rejects_unknown_level(self):
        with pytest.raises(SystemExit):
            parse_args(["--log-level", "LOUD"])

    @patch("fy_arbitrage.runner.logging_config.setup_from_name")
    def test_main_config_error(self, _setup):
        assert main(["--config", "/non/existent.yaml"]) == 1

    @patch("fy_arbitrage.runner.logging_config.setup_from_name")
    @patch("fy_arbitrage.runner.load_runtime_config")
    def test_main_init_failure(self, mock_load, _setup):
        mock_load.return_value = runtime_config(rpc_url=None)
        assert main(["--paper"]) == 1

    @patch("fy_arbitrage.runner.logging_config.setup_from_name")
    @patch("fy_arbitrage.runner.run_strategy", new_callable=AsyncMock)
    @patch("fy_arbitrage.runner.build_components")
    @patch("fy_arbitrage.runner.load_runtime_config")
    def test_main_once_with_rpc_override(self, mock_load, mock_build, mock_run, _setup):
        mock_load.return_value = runtime_config(rpc_url=None)
        mock_build.return_value = (Mock(), Mock(), Mock())

        assert main(["--paper", "--once", "--rpc-url", "http://node:8545"]) == 0

        runtime = mock_build.call_args[0][0]
        assert runtime.network.rpc_url == "http://node:8545"
        assert mock_build.call_args[1]["max_blocks"] == 1
        assert mock_build.call_args[1]["paper"] is True
        mock_run.assert_awaited_once()
