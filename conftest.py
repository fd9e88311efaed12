"""PyTest unit tests configuration file."""
import dataclasses

import pytest


@dataclasses.dataclass
class TurnOnTestSuiteArgument:
    """CLI argument together with a keyword used to mark tests turned off by default.

    Attrs:
        cli_flag: CLI flag to be used to turn on an optional test suite, e.g., --run-slow
        help_message: CLI help message, describing the flag
        mark_keyword: keyword used to mark the unit tests to be skipped
            if the flag is not specified.
            Note that it should be a valid Python name, e.g., slow
        inivalue_line_description: a short description of the marker `mark_keyword`.
    """

    cli_flag: str
    help_message: str
    mark_keyword: str
    inivalue_line_description: str

    def reason(self) -> str:
        """Reason for skipping, generated when the tests are run."""
        return f"Need {self.cli_flag} option to run."

    def inivalue_line(self) -> str:
        """Generates human-readable description describing the argument."""
        return f"{self.mark_keyword}: {self.inivalue_line_description}"


TURN_ON_ARGUMENTS = [
    TurnOnTestSuiteArgument(
        cli_flag="--run-slow",
        help_message="Run long Markov chains checking posterior recovery.",
        mark_keyword="slow",
        inivalue_line_description="mark test as running a long Markov chain.",
    ),
]


def pytest_addoption(parser):
    """Adds CLI options."""
    for argument in TURN_ON_ARGUMENTS:
        parser.addoption(
            argument.cli_flag,
            action="store_true",
            default=False,
            help=argument.help_message,
        )

    parser.addoption(
        "--save-artifact",
        action="store_true",
        help="Auxiliary artifact will be generated.",
    )


def pytest_configure(config):
    """Registers the markers."""
    for argument in TURN_ON_ARGUMENTS:
        config.addinivalue_line("markers", argument.inivalue_line())


@pytest.fixture
def save_artifact(request):
    """Boolean fixture representing a CLI flag.

    True if generated artifacts should be saved, False if not."""
    return request.config.getoption("--save-artifact")


def add_skipping_markers(
    argument: TurnOnTestSuiteArgument,
    config,
    items,
) -> None:
    """Skips the tests marked with `argument.mark_keyword`,
    unless the CLI flag is provided."""
    if not config.getoption(argument.cli_flag):
        skip = pytest.mark.skip(reason=argument.reason())
        for item in items:
            if argument.mark_keyword in item.keywords:
                item.add_marker(skip)


def pytest_collection_modifyitems(config, items):
    """Adds skipping markers for all optional test suites."""
    for argument in TURN_ON_ARGUMENTS:
        add_skipping_markers(argument=argument, config=config, items=items)
