"""
Tests for the HTTP exposition endpoint
"""
import pytest
from unittest.mock import patch

from container_exporter.config import ExporterConfig
from container_exporter.exporter import create_app, main
from tests.fixtures.mock_runtime import unavailable_client


@pytest.fixture
def config():
    return ExporterConfig(host="127.0.0.1", port=9099)


class TestMetricsEndpoint:
    """Test GET /metrics"""

    def test_serves_prometheus_text(self, config, runtime_client):
        app = create_app(config, client_factory=lambda: runtime_client)

        response = app.test_client().get('/metrics')

        assert response.status_code == 200
        assert response.mimetype == 'text/plain'
        body = response.get_data(as_text=True)
        assert 'cpu_usage{container_name="/my-app",cpu="all",id="abcdef123456",mode="total"} 200.0' in body
        assert 'network_transmit_bytes{container_name="/my-app",id="abcdef123456",name="eth0"} 10.0' in body
        assert 'process_metrics_gathering_time ' in body

    def test_each_scrape_runs_a_fresh_pass(self, config, runtime_client):
        app = create_app(config, client_factory=lambda: runtime_client)
        client = app.test_client()

        first = client.get('/metrics')
        second = client.get('/metrics')

        assert first.status_code == second.status_code == 200
        assert len(runtime_client.stats_calls) == 4

    def test_runtime_unavailable_returns_503(self, config):
        app = create_app(config, client_factory=unavailable_client)

        response = app.test_client().get('/metrics')

        assert response.status_code == 503
        assert 'cpu_usage' not in response.get_data(as_text=True)

    def test_post_not_allowed(self, config, runtime_client):
        app = create_app(config, client_factory=lambda: runtime_client)

        response = app.test_client().post('/metrics')

        assert response.status_code == 405

    def test_default_factory_builds_docker_client(self, config, runtime_client):
        with patch('container_exporter.exporter.DockerRuntimeClient', return_value=runtime_client) as mock_client:
            app = create_app(config)
            response = app.test_client().get('/metrics')

        assert response.status_code == 200
        mock_client.assert_called_once_with(None, timeout=60, max_pool_size=64)


class TestMain:
    """Test process entry point"""

    @patch('container_exporter.exporter.signal.signal')
    @patch('container_exporter.exporter.load_dotenv')
    @patch('container_exporter.exporter.Flask.run')
    def test_runs_server_on_configured_port(self, mock_run, mock_dotenv, mock_signal, monkeypatch):
        monkeypatch.setenv('EXPORTER_PORT', '9123')

        main()

        mock_dotenv.assert_called_once()
        mock_run.assert_called_once_with(host='0.0.0.0', port=9123, threaded=True)

    @patch('container_exporter.exporter.signal.signal')
    @patch('container_exporter.exporter.load_dotenv')
    @patch('container_exporter.exporter.Flask.run')
    def test_bind_failure_exits(self, mock_run, mock_dotenv, mock_signal):
        mock_run.side_effect = OSError("Address already in use")

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
