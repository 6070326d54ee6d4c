"""
Discovery orchestration: locate → snapshot → activate → snapshot → diff.
"""

import pytest

from provider_kernel.autodiscover import (
    DiscoveryRequest,
    DiscoveryResult,
    ModuleActivator,
    auto_register,
    discover,
    discover_from_settings,
)
from provider_kernel.config.base_settings import DiscoverySettings
from provider_kernel.di.errors import ActivationError, DiscoveryError, NoFilesFoundError
from provider_kernel.di.registry import Container
from provider_kernel.di.tokens import Marker

SERVICE_PATTERNS = ["**/*.service.*"]


class Clock:
    pass


def make_clock():
    return Clock()


# ============================================================================
# Empty and strict runs
# ============================================================================

class TestNoFiles:

    def test_non_strict_missing_roots_is_empty_success(self, isolated_container):
        result = auto_register(["/non/existent/path"], SERVICE_PATTERNS, registry=isolated_container)
        assert result.files == []
        assert result.added == {}
        assert result.added_count == 0

    def test_strict_missing_roots_raises(self, isolated_container):
        with pytest.raises(NoFilesFoundError) as exc:
            auto_register(["/non/existent/path"], strict=True, registry=isolated_container)
        assert exc.value.roots == ["/non/existent/path"]
        assert "/non/existent/path" in str(exc.value)

    def test_strict_no_matching_file_raises(self, isolated_container, fixtures_dir):
        request = DiscoveryRequest([fixtures_dir], ["**/*.nothing"], strict=True, registry=isolated_container)
        with pytest.raises(NoFilesFoundError) as exc:
            discover(request)
        assert exc.value.patterns == ["**/*.nothing"]
        assert isinstance(exc.value, DiscoveryError)

    def test_strict_failure_activates_nothing(self, isolated_container, recording_activator):
        activator = recording_activator()
        with pytest.raises(NoFilesFoundError):
            auto_register(["/nowhere"], strict=True, registry=isolated_container, activator=activator)
        assert activator.paths == []


# ============================================================================
# Module activation against fixture files
# ============================================================================

class TestFixtureDiscovery:

    def test_one_file_registering_two_tokens(self, isolated_container, fixtures_dir):
        result = auto_register(
            [fixtures_dir / "di"], SERVICE_PATTERNS, registry=isolated_container
        )

        assert len(result.files) == 1
        assert result.files[0].endswith("sample.service.py")
        assert len(result.added) == 2
        assert "greeting" in result.added
        assert isolated_container.resolve("greeting") == "hello"

        (marker,) = [t for t in result.added if isinstance(t, Marker)]
        assert marker.label == "Greeter"
        assert isolated_container.resolve(marker).greet("Ada") == "Hello Ada"

    def test_full_fixture_registers_every_provider_kind(self, isolated_container, fixtures_dir):
        result = auto_register([fixtures_dir / "full"], ["**/*.service.py"], registry=isolated_container)

        assert len(result.files) == 1
        assert result.added_count == 8
        assert set(t for t in result.added if isinstance(t, str)) == {
            "testfactory",
            "tokenTestService2",
            "TOKEN_TestService2",
        }
        assert isolated_container.resolve("testfactory") == 4
        # last registration wins: alias to the TestService2 class → its value provider
        assert isolated_container.resolve("tokenTestService2") == "TestService2"

        labels = result.describe()
        assert 'token "testfactory" -> useFactory(int)' in labels
        assert 'token "tokenTestService2" -> useToken(token(token "TOKEN_TestService2"))' in labels
        assert "class TestService -> useClass(TestService)" in labels

    def test_second_run_on_same_container_adds_nothing(self, isolated_container, fixtures_dir):
        first = auto_register([fixtures_dir / "di"], SERVICE_PATTERNS, registry=isolated_container)
        second = auto_register([fixtures_dir / "di"], SERVICE_PATTERNS, registry=isolated_container)

        assert first.added
        assert second.files == first.files
        assert second.added == {}
        assert len(isolated_container.registrations("greeting")) == 1

    def test_each_container_gets_its_own_activation(self, fixtures_dir):
        a, b = Container("a"), Container("b")
        auto_register([fixtures_dir / "di"], SERVICE_PATTERNS, registry=a)
        result = auto_register([fixtures_dir / "di"], SERVICE_PATTERNS, registry=b)

        assert len(result.added) == 2
        assert a.resolve("greeting") == b.resolve("greeting") == "hello"

    def test_activation_binds_target_not_default(self, isolated_container, fixtures_dir):
        from provider_kernel.di.registry import container as default_container

        before = len(default_container)
        other = Container("other")
        auto_register([fixtures_dir / "di"], SERVICE_PATTERNS, registry=other)

        assert "greeting" in other
        assert "greeting" not in isolated_container
        assert len(default_container) == before

    def test_defaults_to_current_container(self, isolated_container, fixtures_dir):
        result = discover(DiscoveryRequest([fixtures_dir / "di"], SERVICE_PATTERNS))
        assert result.added
        assert isolated_container.resolve("greeting") == "hello"

    def test_non_python_matches_fail_activation(self, isolated_container, fixtures_dir):
        with pytest.raises(ActivationError) as exc:
            auto_register([fixtures_dir / "di"], ["**/*.txt"], registry=isolated_container)
        assert exc.value.path.endswith("notes.txt")
        assert isinstance(exc.value.cause, ImportError)


# ============================================================================
# Activation failures
# ============================================================================

class TestActivationFailure:

    def test_failure_carries_path_and_cause_and_stops(self, isolated_container, fixtures_dir):
        with pytest.raises(ActivationError) as exc:
            auto_register([fixtures_dir / "broken"], SERVICE_PATTERNS, registry=isolated_container)

        err = exc.value
        assert err.path.endswith("b_broken.service.py")
        assert isinstance(err.cause, RuntimeError)
        assert err.__cause__ is err.cause
        assert "registry file is broken" in str(err)

        # no rollback for earlier side effects, nothing after the failure
        assert isolated_container.resolve("first") == 1
        assert isolated_container.resolve("before_failure") is True
        assert "never" not in isolated_container

    def test_failed_file_is_retried_on_next_run(self, isolated_container, fixtures_dir):
        for _ in range(2):
            with pytest.raises(ActivationError):
                auto_register([fixtures_dir / "broken"], SERVICE_PATTERNS, registry=isolated_container)
        assert len(isolated_container.registrations("first")) == 1
        assert len(isolated_container.registrations("before_failure")) == 2

    def test_custom_activator_error_is_wrapped(self, isolated_container, fixtures_dir, recording_activator):
        def explode(path):
            raise KeyError(path)

        with pytest.raises(ActivationError) as exc:
            auto_register(
                [fixtures_dir / "full"],
                SERVICE_PATTERNS,
                registry=isolated_container,
                activator=recording_activator(explode),
            )
        assert isinstance(exc.value.cause, KeyError)


# ============================================================================
# Injected activators
# ============================================================================

class TestInjectedActivator:

    def test_files_activated_in_sorted_order(self, isolated_container, fixtures_dir, recording_activator):
        activator = recording_activator()
        result = auto_register(
            [fixtures_dir], SERVICE_PATTERNS, registry=isolated_container, activator=activator
        )
        assert activator.paths == result.files == sorted(result.files)
        assert len(result.files) == 5

    def test_idempotent_reregistration(self, isolated_container, fixtures_dir, recording_activator):
        clock_token = Marker("Clock")
        settings = {"debug": True}

        def activate(path):
            isolated_container.register(clock_token, use_factory=make_clock)
            isolated_container.register("settings", use_value=dict(settings))
            isolated_container.register(Clock, use_class=Clock)

        activator = recording_activator(activate)
        first = auto_register([fixtures_dir / "di"], SERVICE_PATTERNS, registry=isolated_container, activator=activator)
        second = auto_register([fixtures_dir / "di"], SERVICE_PATTERNS, registry=isolated_container, activator=activator)

        assert set(first.added) == {clock_token, "settings", Clock}
        assert second.added == {}
        assert len(activator.paths) == 2

    def test_result_helpers(self, isolated_container, fixtures_dir, recording_activator):
        def activate(path):
            isolated_container.register("a", use_value=None)
            isolated_container.register("a", use_value=1)

        result = auto_register(
            [fixtures_dir / "di"], SERVICE_PATTERNS,
            registry=isolated_container, activator=recording_activator(activate),
        )
        assert isinstance(result, DiscoveryResult)
        assert result.added_count == 2
        assert result.describe() == ['token "a" -> useValue(null)', 'token "a" -> useValue(int)']


# ============================================================================
# Module activator
# ============================================================================

class TestModuleActivator:

    def test_tracks_loaded_modules_per_container(self, isolated_container, fixtures_dir):
        path = str(fixtures_dir / "di" / "sample.service.py")
        activator = ModuleActivator(isolated_container)
        activator(path)
        activator(path)

        assert list(activator.modules) == [path]
        assert ModuleActivator(isolated_container).modules is activator.modules
        assert activator.modules[path].SampleRegistry.__name__ == "SampleRegistry"
        assert len(isolated_container.registrations("greeting")) == 1


# ============================================================================
# Settings-driven discovery
# ============================================================================

class TestDiscoverFromSettings:

    def test_uses_settings(self, isolated_container, fixtures_dir):
        settings = DiscoverySettings(roots=[str(fixtures_dir / "di")], patterns=SERVICE_PATTERNS)
        result = discover_from_settings(settings, isolated_container)
        assert len(result.added) == 2

    def test_strict_from_settings(self, isolated_container):
        settings = DiscoverySettings(roots=["/non/existent"], strict=True)
        with pytest.raises(NoFilesFoundError):
            discover_from_settings(settings, isolated_container)
