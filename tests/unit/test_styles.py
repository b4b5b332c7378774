"""Tests for style resolution."""

import pytest

from jsonui.document import ComponentStyles, Definition, Fractional, Style
from jsonui.styles import EMPTY_STYLE, StaticDesignSystem, StyleResolver


def styles(**records) -> dict[str, Style]:
    return {name: Style.model_validate(record) for name, record in records.items()}


@pytest.mark.unit
class TestInheritance:
    """Inheritance chains and overrides."""

    def test_chain_merges_root_first(self):
        resolver = StyleResolver(styles(
            a={"fontSize": 12, "textColor": "#111", "cornerRadius": 4},
            b={"inherits": "a", "fontSize": 14, "fontWeight": "bold"},
            c={"inherits": "b", "textColor": "#333"},
        ))

        resolved = resolver.resolve("c")

        assert resolved.font_size == 14
        assert resolved.font_weight.value == "bold"
        assert resolved.text_color == "#333"
        assert resolved.corner_radius == 4

    def test_inline_overrides_reference(self):
        resolver = StyleResolver(styles(base={"fontSize": 12, "textColor": "#111"}))

        resolved = resolver.resolve("base", Style(text_color="#F00"))

        assert resolved.font_size == 12
        assert resolved.text_color == "#F00"

    def test_inline_inherits_used_without_reference(self):
        resolver = StyleResolver(styles(base={"fontSize": 12}))

        resolved = resolver.resolve(None, Style(inherits="base", tint_color="#0F0"))

        assert resolved.font_size == 12
        assert resolved.tint_color == "#0F0"

    def test_unknown_reference_is_empty(self):
        assert StyleResolver().resolve("nope") == EMPTY_STYLE
        assert StyleResolver().resolve(None).is_empty

    def test_missing_parent_keeps_child(self):
        resolver = StyleResolver(styles(child={"inherits": "ghost", "fontSize": 10}))
        assert resolver.resolve("child").font_size == 10

    def test_cycle_terminates(self):
        resolver = StyleResolver(styles(
            a={"inherits": "b", "fontSize": 10},
            b={"inherits": "a", "textColor": "#000"},
        ))

        resolved = resolver.resolve("a")

        assert resolved.font_size == 10
        assert resolved.text_color == "#000"

    def test_self_reference_terminates(self):
        resolver = StyleResolver(styles(a={"inherits": "a", "fontSize": 10}))
        assert resolver.resolve("a").font_size == 10


@pytest.mark.unit
class TestCompositeProperties:
    """Shadow and padding merge rules."""

    def test_empty_shadow_clears_inherited(self):
        resolver = StyleResolver(styles(
            raised={"shadow": {"color": "#000", "radius": 6, "y": 2}},
            flat={"inherits": "raised", "shadow": {}},
        ))

        assert resolver.resolve("raised").has_shadow
        assert not resolver.resolve("flat").has_shadow

    def test_partial_shadow_merges(self):
        resolver = StyleResolver(styles(
            raised={"shadow": {"color": "#000", "radius": 6}},
            softer={"inherits": "raised", "shadow": {"radius": 2}},
        ))

        resolved = resolver.resolve("softer")

        assert resolved.shadow_color == "#000"
        assert resolved.shadow_radius == 2

    def test_padding_shorthand_and_edges(self):
        resolver = StyleResolver(styles(
            box={"padding": {"horizontal": 8, "vertical": 4, "top": 10}},
        ))

        resolved = resolver.resolve("box")

        assert (resolved.padding_top, resolved.padding_bottom) == (10, 4)
        assert (resolved.padding_leading, resolved.padding_trailing) == (8, 8)

    def test_empty_padding_clears(self):
        resolver = StyleResolver(styles(
            box={"padding": 12},
            tight={"inherits": "box", "padding": {}},
        ))

        resolved = resolver.resolve("tight")

        assert resolved.padding_top is None
        assert resolved.padding_leading is None

    def test_to_dict(self):
        resolver = StyleResolver(styles(
            card={"fontWeight": "bold", "width": {"fractional": 0.5}, "backgroundColor": "#FFF"},
        ))

        assert resolver.resolve("card").to_dict() == {
            "fontWeight": "bold",
            "width": {"fractional": 0.5},
            "backgroundColor": "#FFF",
        }

    def test_fractional_dimension(self):
        resolver = StyleResolver(styles(half={"width": {"fractional": 0.5}, "height": 40}))
        resolved = resolver.resolve("half")
        assert resolved.width == Fractional(fractional=0.5)
        assert resolved.height == 40


@pytest.mark.unit
class TestDesignSystem:
    """`@` references through a design system provider."""

    def test_design_system_reference(self):
        design = StaticDesignSystem({"@button.primary": {"backgroundColor": "#007AFF"}})
        resolver = StyleResolver(design_system=design)

        assert resolver.resolve("@button.primary").background_color == "#007AFF"

    def test_inline_overrides_design_system(self):
        design = StaticDesignSystem({
            "btn.primary": {"cornerRadius": 12, "backgroundColor": "#6366F1"},
        })
        resolver = StyleResolver(design_system=design)

        resolved = resolver.resolve("@btn.primary", Style(background_color="#FF0000"))

        assert resolved.corner_radius == 12
        assert resolved.background_color == "#FF0000"

    def test_document_style_inherits_design_system(self):
        design = StaticDesignSystem({"button.primary": Style(background_color="#007AFF", corner_radius=8)})
        resolver = StyleResolver(
            styles(cta={"inherits": "@button.primary", "cornerRadius": 12}),
            design_system=design,
        )

        resolved = resolver.resolve("cta")

        assert resolved.background_color == "#007AFF"
        assert resolved.corner_radius == 12

    def test_design_system_does_not_shadow_document_ids(self):
        design = StaticDesignSystem({"title": {"fontSize": 40}})
        resolver = StyleResolver(styles(title={"fontSize": 20}), design_system=design)

        assert resolver.resolve("title").font_size == 20
        assert resolver.resolve("@title").font_size == 40

    def test_reference_without_provider_is_empty(self):
        assert StyleResolver().resolve("@button.primary").is_empty


@pytest.mark.unit
class TestStateStyles:
    """normal / selected / disabled sets."""

    def test_resolve_states(self):
        resolver = StyleResolver(styles(
            chip={"backgroundColor": "#EEE"},
            chipOn={"inherits": "chip", "backgroundColor": "#00F"},
        ))

        states = resolver.resolve_states(ComponentStyles(normal="chip", selected="chipOn"))

        assert states.normal.background_color == "#EEE"
        assert states.selected.background_color == "#00F"
        assert states.disabled is None

    def test_without_state_set(self):
        resolver = StyleResolver(styles(chip={"backgroundColor": "#EEE"}))
        states = resolver.resolve_states(style_id="chip")
        assert states.normal.background_color == "#EEE"
        assert states.selected is None


@pytest.mark.unit
def test_for_document_respects_cache_setting(document_factory, settings):
    """The style cache is only built when enabled."""
    definition = Definition.model_validate(document_factory(styles={"a": {"fontSize": 10}}))

    cached = StyleResolver.for_document(definition, settings=settings)
    uncached = StyleResolver.for_document(
        definition, settings=settings.model_copy(update={"enable_style_cache": False})
    )

    assert cached.cache is not None
    assert uncached.cache is None
    assert uncached.resolve("a").font_size == 10
