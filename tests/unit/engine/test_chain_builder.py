"""
Tests for CandidateChainBuilder - composing location >> section >> field.
"""

import pytest

from pattern_locator.engine.chain_builder import (
    CandidateChainBuilder,
    apply_instance,
    is_xpath,
)
from pattern_locator.engine.descriptor import parse_field
from pattern_locator.exceptions import ConfigurationError
from pattern_locator.patterns import PatternSet


@pytest.fixture
def builder(registry):
    return CandidateChainBuilder(registry)


class TestApplyInstance:
    """Test instance qualification."""

    def test_first_instance_unchanged(self):
        """Test that instance 1 adds nothing."""
        assert apply_instance("//button", 1, in_container=False) == "//button"

    def test_bare_xpath(self):
        """Test that a bare XPath is wrapped and indexed."""
        assert apply_instance("//button[text()='Go']", 2, in_container=False) == "(//button[text()='Go'])[2]"

    def test_css_uses_nth(self):
        """Test that CSS selectors get a zero-based nth qualifier."""
        assert apply_instance("button.go", 3, in_container=False) == "button.go >> nth=2"

    def test_xpath_in_container_uses_nth(self):
        """Test that chained XPath gets an nth qualifier."""
        assert apply_instance("//input", 2, in_container=True) == "//input >> nth=1"

    def test_grouped_xpath_uses_nth(self):
        """Test that an already grouped XPath is not wrapped again."""
        assert apply_instance("(//input)[1]", 2, in_container=False) == "(//input)[1] >> nth=1"

    def test_is_xpath(self):
        """Test XPath detection."""
        assert is_xpath("//div")
        assert is_xpath(" (//div)[2]")
        assert not is_xpath("div#main")


class TestBuildWithoutProbe:
    """Test candidate composition without a live page."""

    @pytest.mark.asyncio
    async def test_plain_field(self, builder, login_page):
        """Test a field with no containers."""
        locator = await builder.build(login_page, parse_field("Submit"), "button")

        assert locator.candidates == ["//button[text()='Submit']", "button:has-text('Submit')"]
        assert locator.description == "loginPage.button: Submit[1]"
        assert locator.chain_prefix is None
        assert locator.scroll_candidates == ["div.scrollable"]

    @pytest.mark.asyncio
    async def test_section_with_instance(self, builder, login_page):
        """Test section chaining with a second instance."""
        locator = await builder.build(login_page, parse_field("{Login Form} Username[2]"), "input")

        assert locator.candidates == [
            "#login >> //input[@name='username'] >> nth=1",
            "#login >> input[placeholder='Username'] >> nth=1",
        ]
        assert locator.base_candidates == [
            "#login >> //input[@name='username']",
            "#login >> input[placeholder='Username']",
        ]
        assert locator.chain_prefixes == ["#login"]
        assert locator.instance == 2
        assert locator.label_pending is False

    @pytest.mark.asyncio
    async def test_location_and_section_are_container_major(self, builder, login_page):
        """Test that every location wraps every section, location first."""
        locator = await builder.build(
            login_page,
            parse_field("{{Main Content}} {Remember Me} Stay signed in"),
            "checkbox",
        )

        assert locator.chain_prefixes == [
            "main >> div.remember-me",
            "div#content >> div.remember-me",
        ]
        assert locator.candidates == [
            "main >> div.remember-me >> //input[@type='checkbox'][@name='stay signed in']",
            "div#content >> div.remember-me >> //input[@type='checkbox'][@name='stay signed in']",
        ]

    @pytest.mark.asyncio
    async def test_location_without_section(self, builder, login_page):
        """Test a location on its own."""
        locator = await builder.build(login_page, parse_field("{{Main Content}} Help"), "link")

        assert locator.candidates == [
            "main >> //a[text()='Help']",
            "div#content >> //a[text()='Help']",
        ]

    @pytest.mark.asyncio
    async def test_bare_xpath_instance(self, builder, login_page):
        """Test instance qualification outside containers."""
        locator = await builder.build(login_page, parse_field("Next[2]"), "button")

        assert locator.candidates == [
            "(//button[text()='Next'])[2]",
            "button:has-text('Next') >> nth=1",
        ]

    @pytest.mark.asyncio
    async def test_sub_type(self, builder, login_page):
        """Test exact sub-type and fallback to the base type."""
        exact = await builder.build(login_page, parse_field("Options"), "checkbox.fieldSet")
        fallback = await builder.build(login_page, parse_field("Options"), "checkbox.toggle")

        assert exact.candidates == ["//fieldset[legend='Options']//input[@type='checkbox']"]
        assert fallback.candidates == ["//input[@type='checkbox'][@name='options']"]

    @pytest.mark.asyncio
    async def test_for_id_skipped_without_probe(self, builder, login_page):
        """Test that forId candidates are dropped when no label was looked up."""
        locator = await builder.build(login_page, parse_field("Email"), "input")

        assert all("@id=" not in c for c in locator.candidates)
        assert locator.for_id is None

    @pytest.mark.asyncio
    async def test_duplicates_removed(self, registry):
        """Test that duplicate candidates keep their first position."""
        pattern_set = PatternSet(id="dupPage", fields={"button": "#go;button;#go"})
        locator = await CandidateChainBuilder(registry).build(pattern_set, parse_field("Go"), "button")

        assert locator.candidates == ["#go", "button"]
        assert locator.base_candidates == ["#go", "button"]

    @pytest.mark.asyncio
    async def test_extra_variables(self, registry):
        """Test that configured variables reach the templates."""
        pattern_set = PatternSet(id="envPage", fields={"button": "[data-env='#{env}'] >> text=#{fieldName}"})
        builder = CandidateChainBuilder(registry, variables={"env": "qa"})

        locator = await builder.build(pattern_set, parse_field("Go"), "button")

        assert locator.candidates == ["[data-env='qa'] >> text=Go"]

    @pytest.mark.asyncio
    async def test_field_value(self, registry):
        """Test binding #{fieldValue}."""
        pattern_set = PatternSet(id="selectPage", fields={"option": "//option[@value='#{fieldValue}']"})
        locator = await CandidateChainBuilder(registry).build(
            pattern_set, parse_field("Country"), "option", field_value="NZ"
        )

        assert locator.candidates == ["//option[@value='NZ']"]


class TestBuildErrors:
    """Test configuration errors during composition."""

    @pytest.mark.asyncio
    async def test_missing_field_template(self, builder, login_page):
        """Test that an undefined element type is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            await builder.build(login_page, parse_field("Country"), "dropdown.multi")

        assert exc_info.value.details["keys_tried"] == ["dropdown", "dropdown.multi"]

    @pytest.mark.asyncio
    async def test_unknown_section(self, builder, login_page):
        """Test that an undefined section is a configuration error."""
        with pytest.raises(ConfigurationError) as exc_info:
            await builder.build(login_page, parse_field("{Signup Form} Email"), "input")

        assert "Signup Form" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unknown_location(self, builder, login_page):
        """Test that an undefined location is a configuration error."""
        with pytest.raises(ConfigurationError):
            await builder.build(login_page, parse_field("{{Footer}} Help"), "link")

    @pytest.mark.asyncio
    async def test_empty_section_template(self, registry):
        """Test that a section with no candidates is a configuration error."""
        pattern_set = PatternSet(id="p", fields={"button": "button"}, sections={"Form": " ; "})
        with pytest.raises(ConfigurationError):
            await CandidateChainBuilder(registry).build(pattern_set, parse_field("{Form} Go"), "button")

    @pytest.mark.asyncio
    async def test_unbound_section_value(self, registry):
        """Test that a section value placeholder needs a value."""
        pattern_set = PatternSet(
            id="p",
            fields={"button": "button"},
            sections={"Row": "tr[data-row='#{section.value}']"},
        )
        builder = CandidateChainBuilder(registry)

        with pytest.raises(ConfigurationError):
            await builder.build(pattern_set, parse_field("{Row} Edit"), "button")

        locator = await builder.build(pattern_set, parse_field("{Row:: 7} Edit"), "button")
        assert locator.candidates == ["tr[data-row='7'] >> button"]


class TestLabelIndirection:
    """Test label lookup for label-eligible types."""

    @pytest.mark.asyncio
    async def test_label_found(self, builder, login_page, fake_probe):
        """Test that forId candidates come first when the label has a 'for'."""
        label = "//label[text()='Email']"
        probe = fake_probe(visible=[label], attributes={label: {"for": "email-input"}})

        locator = await builder.build(login_page, parse_field("Email"), "input", probe=probe)

        assert locator.candidates == [
            "//input[@id='email-input']",
            "//input[@name='email']",
            "input[placeholder='Email']",
        ]
        assert locator.for_id == "email-input"
        assert locator.label_pending is False

    @pytest.mark.asyncio
    async def test_label_in_section_with_instance(self, builder, login_page, fake_probe):
        """Test that the label is searched in the section and qualified."""
        label = "#login >> //label[text()='Email'] >> nth=1"
        probe = fake_probe(hidden=[label], attributes={label: {"for": "email-2"}})

        locator = await builder.build(login_page, parse_field("{Login Form} Email[2]"), "input", probe=probe)

        assert probe.probed() == [label]
        assert locator.candidates[0] == "#login >> //input[@id='email-2']"
        assert locator.candidates[1] == "#login >> //input[@name='email'] >> nth=1"

    @pytest.mark.asyncio
    async def test_label_missing(self, builder, login_page, fake_probe):
        """Test that a missing label marks the lookup as pending."""
        probe = fake_probe()

        locator = await builder.build(login_page, parse_field("Email"), "input", probe=probe)

        assert locator.label_pending is True
        assert locator.candidates == ["//input[@name='email']", "input[placeholder='Email']"]

    @pytest.mark.asyncio
    async def test_label_without_for(self, builder, login_page, fake_probe):
        """Test a label that has no 'for' attribute."""
        probe = fake_probe(visible=["//label[text()='Email']"])

        locator = await builder.build(login_page, parse_field("Email"), "input", probe=probe)

        assert locator.label_pending is True
        assert locator.for_id is None

    @pytest.mark.asyncio
    async def test_not_label_eligible(self, builder, login_page, fake_probe):
        """Test that buttons never look for labels."""
        probe = fake_probe()

        await builder.build(login_page, parse_field("Submit"), "button", probe=probe)

        assert probe.calls == []
