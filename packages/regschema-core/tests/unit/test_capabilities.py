"""Unit tests for regschema_core.capabilities."""

from __future__ import annotations

from regschema_core.capabilities import Capability, CapabilityProbe, StaticCapabilityProbe


class TestCapability:
    """Tests for the Capability enum."""

    def test_values(self) -> None:
        """Capabilities serialize as lowercase strings."""
        assert Capability.COMPONENT.value == "component"
        assert Capability("resource") is Capability.RESOURCE


class TestStaticCapabilityProbe:
    """Tests for StaticCapabilityProbe."""

    def test_reports_membership(self) -> None:
        """Flags come from the configured sets."""
        probe = StaticCapabilityProbe(components=["Player"], resources=["Score"])
        assert probe.is_component("Player") is True
        assert probe.is_resource("Player") is False
        assert probe.is_resource("Score") is True

    def test_absence_is_false(self) -> None:
        """Unknown types have neither capability."""
        probe = StaticCapabilityProbe()
        assert probe.is_component("Player") is False
        assert probe.is_resource("Player") is False

    def test_both_capabilities(self) -> None:
        """A type may be a component and a resource."""
        probe = StaticCapabilityProbe(components=["Clock"], resources=["Clock"])
        assert probe.is_component("Clock") and probe.is_resource("Clock")

    def test_satisfies_protocol(self) -> None:
        """StaticCapabilityProbe is a CapabilityProbe."""
        assert isinstance(StaticCapabilityProbe(), CapabilityProbe)
