from __future__ import annotations

import re

from refsync.domain.variables import PipelineVariables, environment_name


def test_environment_name() -> None:
    assert environment_name("release.artifacts.app.buildId") == "RELEASE_ARTIFACTS_APP_BUILDID"
    assert environment_name("build number") == "BUILD_NUMBER"


def test_get_accepts_dotted_and_environment_spellings() -> None:
    variables = PipelineVariables.from_mapping({"RELEASE_ARTIFACTS_APP_BUILDID": "17"})

    assert variables.get("release.artifacts.app.buildId") == "17"
    assert variables.get("RELEASE_ARTIFACTS_APP_BUILDID") == "17"


def test_get_is_case_insensitive_for_dotted_names() -> None:
    variables = PipelineVariables.from_mapping({"Release.Artifacts.App.SourceVersion": "abc"})

    assert variables.get("RELEASE.ARTIFACTS.APP.SOURCEVERSION") == "abc"


def test_blank_values_read_as_missing() -> None:
    variables = PipelineVariables.from_mapping({"EMPTY": "   "})

    assert variables.get("EMPTY") is None
    assert variables.get("UNSET") is None


def test_matching_yields_names_values_and_matches() -> None:
    variables = PipelineVariables.from_mapping({"A_ONE": "1", "B_TWO": "2", "A_THREE": "3"})

    matches = [
        (name, value, match.group(1))
        for name, value, match in variables.matching(re.compile(r"A_(\w+)"))
    ]

    assert matches == [("A_ONE", "1", "ONE"), ("A_THREE", "3", "THREE")]


def test_inputs_are_read_from_input_prefixed_variables() -> None:
    variables = PipelineVariables.from_mapping({"INPUT_STATICTAGNAME": "latest"})

    assert variables.get_input("staticTagName") == "latest"
    assert variables.get_input("searchRegex") is None


def test_delimited_input_splits_lines_and_drops_blanks() -> None:
    variables = PipelineVariables.from_mapping(
        {"INPUT_ARTIFACTINCLUDELIST": "app\r\n  web  \n\n\rdocs"}
    )

    assert variables.get_delimited_input("artifactIncludeList") == ("app", "web", "docs")
    assert variables.get_delimited_input("missing") == ()


def test_from_environment_snapshots_the_given_mapping() -> None:
    environ = {"TF_BUILD": "True"}
    variables = PipelineVariables.from_environment(environ)
    environ["TF_BUILD"] = "False"

    assert variables.get("tf.build") == "True"
    assert len(variables) == 1
