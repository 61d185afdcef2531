import sys

from run_tests import TestRunner, build_parser


def test_unit_suite_command():
    runner = TestRunner(suite="unit", allure_report=False)

    cmd = runner.build_pytest_command()

    assert cmd[:4] == [sys.executable, "-m", "pytest", "storefront_suites/unit"]
    assert "--run-ui" not in cmd
    assert "-q" in cmd


def test_ui_suite_command_carries_browser_options():
    runner = TestRunner(
        suite="ui", tags=["smoke", "P0"], parallel=4, browser="firefox",
        headless=False, verbose=True,
    )

    cmd = runner.build_pytest_command()

    assert "storefront_suites/ui_testing/tests" in cmd
    assert cmd[:3] == [sys.executable, "-m", "pytest"]
    assert cmd[cmd.index("-m", 3) + 1] == "smoke or P0"
    assert cmd[cmd.index("-n") + 1] == "4"
    assert cmd[cmd.index("--alluredir") + 1] == str(runner.allure_results)
    assert {"--run-ui", "--browser=firefox", "--headed", "-v"} <= set(cmd)


def test_base_url_reaches_subprocess_env(monkeypatch):
    monkeypatch.setenv("UI_BASE_URL", "https://www.saucedemo.com")

    assert TestRunner(base_url="http://localhost:3000").build_env()["UI_BASE_URL"] == "http://localhost:3000"
    assert TestRunner().build_env()["UI_BASE_URL"] == "https://www.saucedemo.com"


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.suite == "all"
    assert args.parallel == 1
    assert args.no_allure is False


# Keep pytest from collecting the runner class itself.
TestRunner.__test__ = False
