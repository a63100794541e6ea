"""
Unit tests for the profile field schema and extraction filtering
"""
import pytest
from partnur.app.core.field_schema import (
    FIELDS_BY_NAME,
    PROFILE_FIELDS,
    SEQUENCE_FIELDS,
    TOTAL_WEIGHT,
    coerce_value,
    filter_extraction,
    get_field,
    is_empty,
)


@pytest.mark.unit
class TestFieldSchema:
    """Test suite for the field table"""

    def test_scored_weights_sum_to_100(self):
        assert TOTAL_WEIGHT == 100

    def test_field_names_are_unique(self):
        names = [spec.name for spec in PROFILE_FIELDS]
        assert len(names) == len(set(names))

    def test_unscored_fields_are_recognized(self):
        for name in ('staff_roles', 'supplier_name', 'pricing_model'):
            spec = get_field(name)
            assert spec is not None
            assert spec.is_scored is False

    def test_mobile_number_is_scored_but_not_extractable(self):
        spec = FIELDS_BY_NAME['mobile_number']
        assert spec.weight == 5
        assert spec.extractable is False

    def test_sequence_fields(self):
        assert 'goals' in SEQUENCE_FIELDS
        assert 'peak_days' in SEQUENCE_FIELDS
        assert 'business_type' not in SEQUENCE_FIELDS

    def test_unknown_field(self):
        assert get_field('favourite_colour') is None

    @pytest.mark.parametrize('value,expected', [
        (None, True),
        ('', True),
        ('   ', True),
        ([], True),
        ('salon', False),
        (['UPI'], False),
        (0, False),
    ])
    def test_is_empty(self, value, expected):
        assert is_empty(value) is expected


@pytest.mark.unit
class TestCoercion:
    """Test suite for value coercion"""

    def test_revenue_string_with_separators(self):
        assert coerce_value(FIELDS_BY_NAME['monthly_revenue'], '₹80,000') == 80000

    def test_revenue_float(self):
        assert coerce_value(FIELDS_BY_NAME['monthly_revenue'], 80000.0) == 80000

    def test_revenue_not_a_number(self):
        with pytest.raises(ValueError):
            coerce_value(FIELDS_BY_NAME['monthly_revenue'], 'around eighty thousand')

    def test_boolean_is_not_a_count(self):
        with pytest.raises(ValueError):
            coerce_value(FIELDS_BY_NAME['staff_count'], True)

    def test_scalar_for_sequence_is_wrapped(self):
        assert coerce_value(FIELDS_BY_NAME['platforms_used'], 'Meesho') == ['Meesho']

    def test_sequence_is_deduplicated(self):
        value = coerce_value(FIELDS_BY_NAME['payment_methods'], ['UPI', 'Cash', 'UPI', ''])
        assert value == ['UPI', 'Cash']

    def test_list_for_scalar_rejected(self):
        with pytest.raises(ValueError):
            coerce_value(FIELDS_BY_NAME['business_type'], ['salon', 'spa'])

    def test_strings_are_stripped(self):
        assert coerce_value(FIELDS_BY_NAME['location_city'], '  Kanpur ') == 'Kanpur'


@pytest.mark.unit
class TestFilterExtraction:
    """Test suite for filter_extraction"""

    def test_keeps_recognized_fields(self):
        result = filter_extraction({'business_type': 'salon', 'location_city': 'Kanpur'})
        assert result == {'business_type': 'salon', 'location_city': 'Kanpur'}

    def test_drops_unknown_fields(self):
        result = filter_extraction({'business_type': 'salon', 'owner_name': 'Ravi'})
        assert result == {'business_type': 'salon'}

    def test_drops_mobile_number(self):
        assert filter_extraction({'mobile_number': '+910000000000'}) == {}

    def test_drops_empty_values(self):
        result = filter_extraction({'business_type': '', 'goals': [], 'location_city': None})
        assert result == {}

    def test_drops_uncoercible_values(self):
        result = filter_extraction({'monthly_revenue': 'a lot', 'staff_count': '1e400', 'goals': 'grow'})
        assert result == {'goals': ['grow']}

    @pytest.mark.parametrize('raw', [None, [], 'salon', 42, ['business_type']])
    def test_non_mapping_yields_empty(self, raw):
        assert filter_extraction(raw) == {}


@pytest.mark.unit
class TestIntegerBounds:
    """Test suite for integer values that do not fit a database column"""

    def test_oversized_revenue_rejected(self):
        with pytest.raises(ValueError):
            coerce_value(FIELDS_BY_NAME['monthly_revenue'], 1e30)

    def test_oversized_revenue_string_rejected(self):
        with pytest.raises(ValueError):
            coerce_value(FIELDS_BY_NAME['monthly_revenue'], '9223372036854775808')

    def test_largest_64_bit_value_accepted(self):
        assert coerce_value(FIELDS_BY_NAME['staff_count'], 2 ** 63 - 1) == 2 ** 63 - 1

    def test_oversized_value_dropped_other_fields_kept(self):
        result = filter_extraction({'monthly_revenue': 1e30, 'business_type': 'salon'})
        assert result == {'business_type': 'salon'}
