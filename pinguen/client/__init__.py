from pinguen.client.speedtest_client import SpeedTestClient, SpeedTestError, SpeedTestResult

__all__ = ["SpeedTestClient", "SpeedTestError", "SpeedTestResult"]
