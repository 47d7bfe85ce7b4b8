import pytest

from infotag.core import create_empty
from infotag.errors import (
    AmbiguityError,
    ConfigError,
    InvalidArgument,
    MatchError,
    MissingValueError,
    PatternError,
    ValidationError
)
from infotag.operations import (
    LITERAL,
    PLACEHOLDER,
    Token,
    compile_pattern,
    extract_fields,
    pattern_fields,
    substitute_fields
)

class TestCompilePattern:
    """Tests for compile_pattern()."""

    def test_alternating_tokens(self):
        assert compile_pattern('[((tracknum))] ((Artist)) - ((TITLE))') == [
            Token(LITERAL, '['),
            Token(PLACEHOLDER, 'TRACKNUM'),
            Token(LITERAL, '] '),
            Token(PLACEHOLDER, 'ARTIST'),
            Token(LITERAL, ' - '),
            Token(PLACEHOLDER, 'TITLE'),
        ]

    def test_adjacent_placeholders_have_no_empty_literal(self):
        assert compile_pattern('((ARTIST))((TITLE))') == [
            Token(PLACEHOLDER, 'ARTIST'),
            Token(PLACEHOLDER, 'TITLE'),
        ]

    def test_no_placeholders(self):
        assert compile_pattern('just text') == [Token(LITERAL, 'just text')]
        assert compile_pattern('') == []

    def test_single_parentheses_are_literal(self):
        assert compile_pattern('((TITLE)) (live)') == [
            Token(PLACEHOLDER, 'TITLE'),
            Token(LITERAL, ' (live)'),
        ]

    def test_pattern_fields(self):
        assert pattern_fields('((title)) - ((IGNORE)) - ((TITLE)) ((year))') == ['TITLE', 'YEAR']
        assert pattern_fields(None) == []

class TestExtractFields:
    """Tests for extract_fields() (string -> tag)."""

    def test_bracketed_track_with_lower_case(self, empty_tag):
        changed = extract_fields(
            '[02] Iron Maiden - Rainmaker',
            '[((TRACKNUM))] ((ARTIST)) - ((TITLE))',
            empty_tag,
            case=0
        )
        assert changed == 3
        assert empty_tag['TRACKNUM'] == '02'
        assert empty_tag['ARTIST'] == 'iron maiden'
        assert empty_tag['TITLE'] == 'rainmaker'

    def test_keeps_other_fields(self, empty_tag):
        empty_tag['ALBUM'] = 'Dance of Death'
        extract_fields('02 - Rainmaker', '((TRACKNUM)) - ((TITLE))', empty_tag)
        assert empty_tag['ALBUM'] == 'Dance of Death'
        assert empty_tag['TITLE'] == 'Rainmaker'

    def test_placeholder_names_are_case_insensitive(self, empty_tag):
        assert extract_fields('02 - Rainmaker', '((tracknum)) - ((Title))', empty_tag) == 2

    def test_values_are_trimmed(self, empty_tag):
        extract_fields('  02 -   Rainmaker  ', '((TRACKNUM))-((TITLE))', empty_tag)
        assert empty_tag['TRACKNUM'] == '02'
        assert empty_tag['TITLE'] == 'Rainmaker'

    def test_separator_matched_at_first_occurrence(self, empty_tag):
        # 'AC' ends at the first '-', so the rest still holds a separator
        with pytest.raises(AmbiguityError):
            extract_fields('AC-DC-Thunderstruck', '((ARTIST))-((TITLE))', empty_tag)

    def test_separators_are_not_regular_expressions(self, empty_tag):
        assert extract_fields('Iron Maiden.*Rainmaker', '((ARTIST)).*((TITLE))', empty_tag) == 2
        assert empty_tag['ARTIST'] == 'Iron Maiden'
        assert empty_tag['TITLE'] == 'Rainmaker'

    def test_ignore_placeholder_not_counted(self, empty_tag):
        changed = extract_fields('CD1 - 02 - Rainmaker', '((IGNORE)) - ((TRACKNUM)) - ((TITLE))', empty_tag)
        assert changed == 2
        assert 'IGNORE' not in empty_tag
        assert empty_tag['TRACKNUM'] == '02'

    def test_only_ignore_returns_zero(self, empty_tag):
        assert extract_fields('anything', '((IGNORE))', empty_tag) == 0
        assert empty_tag == create_empty()

    def test_trailing_literal_drops_rest(self, empty_tag):
        assert extract_fields('Rainmaker (live).mp3', '((TITLE)) (', empty_tag) == 1
        assert empty_tag['TITLE'] == 'Rainmaker'

    def test_leading_text_before_first_separator_is_dropped(self, empty_tag):
        extract_fields('xx[02] Rainmaker', '[((TRACKNUM))] ((TITLE))', empty_tag)
        assert empty_tag['TRACKNUM'] == '02'

    def test_empty_middle_value_written(self, empty_tag):
        empty_tag['ARTIST'] = 'Someone'
        assert extract_fields('- Rainmaker', '((ARTIST))- ((TITLE))', empty_tag) == 2
        assert empty_tag['ARTIST'] == ''
        assert empty_tag['TITLE'] == 'Rainmaker'

    def test_weed_applied_before_case(self, empty_tag):
        extract_fields(
            '02 - RAIN_MAKER',
            '((TRACKNUM)) - ((TITLE))',
            empty_tag,
            case=2,
            weed='_'
        )
        assert empty_tag['TITLE'] == 'Rain Maker'

    def test_weed_not_applied_to_ignore(self, empty_tag):
        assert extract_fields('a_b - c_d', '((IGNORE)) - ((TITLE))', empty_tag, weed='_') == 1
        assert empty_tag['TITLE'] == 'c d'

    def test_truncation_warning(self, empty_tag):
        warnings = []
        extract_fields('01 - ' + 'x' * 40, '((TRACKNUM)) - ((TITLE))', empty_tag, warnings=warnings)
        assert empty_tag['TITLE'] == 'x' * 30
        assert any('TITLE must be truncated' in w for w in warnings)

    def test_tracknum_before_comment_shrinks_comment(self, empty_tag):
        warnings = []
        extract_fields('03 - ' + 'c' * 30, '((TRACKNUM)) - ((COMMENT))', empty_tag, warnings=warnings)
        assert empty_tag['COMMENT'] == 'c' * 28

    # --- failures ---

    def test_adjacent_placeholders(self, empty_tag):
        for source in ('Iron MaidenRainmaker', 'x', '((ARTIST))((TITLE))'):
            with pytest.raises(PatternError, match="separated"):
                extract_fields(source, '((ARTIST))((TITLE))', empty_tag)

    def test_unknown_placeholder(self, empty_tag):
        with pytest.raises(PatternError, match="unknown placeholder"):
            extract_fields('a - b', '((ARTIST)) - ((LYRICS))', empty_tag)

    def test_pattern_without_placeholder(self, empty_tag):
        with pytest.raises(PatternError, match="at least one placeholder"):
            extract_fields('a - b', ' - ', empty_tag)
        with pytest.raises(PatternError):
            extract_fields('a - b', '   ', empty_tag)
        with pytest.raises(PatternError):
            extract_fields('a - b', None, empty_tag)

    def test_empty_source(self, empty_tag):
        for source in ('', '   ', None):
            with pytest.raises(InvalidArgument):
                extract_fields(source, '((TITLE))', empty_tag)

    def test_tag_must_be_mapping(self):
        with pytest.raises(InvalidArgument):
            extract_fields('Rainmaker', '((TITLE))', None)

    def test_invalid_case_mode(self, empty_tag):
        with pytest.raises(ConfigError, match="case argument"):
            extract_fields('Rainmaker', '((TITLE))', empty_tag, case=3)

    def test_invalid_weed(self, empty_tag):
        with pytest.raises(ConfigError, match="weed"):
            extract_fields('Rainmaker', '((TITLE))', empty_tag, weed='(')
        assert empty_tag['TITLE'] == ''

    def test_separator_not_found(self, empty_tag):
        with pytest.raises(MatchError, match="separator not found: ' - '"):
            extract_fields('Iron Maiden_Rainmaker', '((ARTIST)) - ((TITLE))', empty_tag)

    def test_ambiguity_with_used_separator(self, empty_tag):
        with pytest.raises(AmbiguityError, match="'-'"):
            extract_fields('02-Iron Maiden-Rain-maker', '((TRACKNUM))-((ARTIST))-((TITLE))', empty_tag)

    def test_ambiguity_check_only_covers_used_separators(self, empty_tag):
        # the final value contains '_', which is not a separator before it
        assert extract_fields('02-Rain_maker', '((TRACKNUM))-((TITLE))', empty_tag) == 2
        assert empty_tag['TITLE'] == 'Rain_maker'

    def test_no_characters_for_last_placeholder(self, empty_tag):
        with pytest.raises(PatternError, match="no characters found at position of placeholder TITLE"):
            extract_fields('02 - ', '((TRACKNUM)) -((TITLE))', empty_tag)

    def test_validation_error_from_field(self, empty_tag):
        with pytest.raises(ValidationError, match="YEAR"):
            extract_fields('83 - Piece of Mind', '((YEAR)) - ((ALBUM))', empty_tag)

    def test_failure_leaves_tag_untouched(self, empty_tag):
        empty_tag['TITLE'] = 'Old'
        with pytest.raises(AmbiguityError):
            extract_fields('New-Artist-X-Y', '((TITLE))-((ARTIST))-((ALBUM))', empty_tag)
        assert empty_tag == dict(create_empty(), TITLE='Old')

class TestSubstituteFields:
    """Tests for substitute_fields() (tag -> string)."""

    def test_basic(self, sample_tag):
        assert substitute_fields('((TRACKNUM))_((ARTIST))-((TITLE))', sample_tag) == '02_Iron Maiden-Rainmaker'

    def test_tracknum_zero_padded(self, sample_tag):
        sample_tag['TRACKNUM'] = '7'
        assert substitute_fields('((TRACKNUM)). ((TITLE))', sample_tag) == '07. Rainmaker'
        sample_tag['TRACKNUM'] = '123'
        assert substitute_fields('((TRACKNUM))', sample_tag) == '123'

    def test_placeholder_repeated(self, sample_tag):
        assert substitute_fields('((ARTIST))/((ARTIST)) - ((TITLE))', sample_tag) == 'Iron Maiden/Iron Maiden - Rainmaker'

    def test_case_insensitive_placeholders(self, sample_tag):
        assert substitute_fields('((artist)) - ((Title))', sample_tag) == 'Iron Maiden - Rainmaker'

    def test_case_applied_to_whole_string(self, sample_tag):
        assert substitute_fields('((ARTIST)) - ((TITLE)) LIVE', sample_tag, case=0) == 'iron maiden - rainmaker live'
        assert substitute_fields('((ARTIST))_((TITLE))', sample_tag, case=2) == 'Iron Maiden_Rainmaker'

    def test_unknown_case_mode_warns(self, sample_tag):
        warnings = []
        assert substitute_fields('((TITLE))', sample_tag, case=9, warnings=warnings) == 'Rainmaker'
        assert any('unknown conversion mode' in w for w in warnings)

    def test_values_trimmed(self, sample_tag):
        sample_tag['TITLE'] = '  Rainmaker  '
        assert substitute_fields('[((TITLE))]', sample_tag) == '[Rainmaker]'

    def test_missing_values_listed(self, sample_tag):
        with pytest.raises(MissingValueError, match="ALBUM, YEAR"):
            substitute_fields('((YEAR)) - ((ALBUM)) - ((TITLE))', sample_tag)

    def test_absent_key_is_missing(self):
        with pytest.raises(MissingValueError, match="GENRE"):
            substitute_fields('((GENRE))', {'TITLE': 'x'})

    def test_max_length_warning(self, sample_tag):
        warnings = []
        sample_tag['ALBUM'] = 'a' * 30
        sample_tag['YEAR'] = '2003'
        substitute_fields('((ALBUM)) ((YEAR))', sample_tag, warnings=warnings)
        assert len(warnings) == 1
        assert 'ALBUM has maximum length' in warnings[0]

    def test_non_field_placeholders_left_alone(self, sample_tag):
        assert substitute_fields('((TITLE)) ((IGNORE))', sample_tag) == 'Rainmaker ((IGNORE))'

    def test_non_numeric_tracknum(self, sample_tag):
        sample_tag['TRACKNUM'] = 'two'
        with pytest.raises(ValidationError):
            substitute_fields('((TRACKNUM))', sample_tag)

    def test_very_long_tracknum(self, sample_tag):
        sample_tag['TRACKNUM'] = '9' * 5000
        with pytest.raises(ValidationError, match="TRACKNUM"):
            substitute_fields('((TRACKNUM))', sample_tag)

    def test_tracknum_leading_zeros(self, sample_tag):
        sample_tag['TRACKNUM'] = '000000007'
        assert substitute_fields('((TRACKNUM))', sample_tag) == '07'

    def test_placeholder_text_inside_value_is_kept(self, sample_tag):
        sample_tag['TITLE'] = '((YEAR))'
        assert substitute_fields('((ARTIST)) - ((TITLE))', sample_tag) == 'Iron Maiden - ((YEAR))'

    def test_value_with_other_field_placeholder(self, sample_tag):
        sample_tag['ARTIST'] = '((TITLE))'
        assert substitute_fields('((ARTIST)) / ((TITLE))', sample_tag) == '((TITLE)) / Rainmaker'

    def test_invalid_arguments(self, sample_tag):
        with pytest.raises(InvalidArgument):
            substitute_fields('((TITLE))', None)
        with pytest.raises(InvalidArgument):
            substitute_fields(None, sample_tag)
