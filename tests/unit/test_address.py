"""
Тесты адресации курсора (Gap/OnElement)

Проверяет:
1. value/left/right (floor/ceil полуцелого адреса)
2. Полушаги и полные шаги
3. Конверсию из полуцелых чисел
4. Отказ от некорректных значений
"""

import pytest

from mathedit.core.domain.address import START, Gap, OnElement, address_from_value


class TestGap:
    """Тесты для Gap"""

    def test_start_is_before_first_element(self) -> None:
        assert START == Gap(0)
        assert START.value == -0.5
        assert START.left == -1
        assert START.right == 0

    def test_floor_and_ceil(self) -> None:
        gap = Gap(3)
        assert gap.value == 2.5
        assert gap.left == 2
        assert gap.right == 3

    def test_full_steps(self) -> None:
        assert Gap(2).step_right() == Gap(3)
        assert Gap(2).step_left() == Gap(1)

    def test_half_steps_land_on_neighbours(self) -> None:
        assert Gap(2).half_step_right() == OnElement(2)
        assert Gap(2).half_step_left() == OnElement(1)

    def test_negative_index_rejected(self) -> None:
        with pytest.raises(ValueError):
            Gap(-1)

    def test_step_left_from_start_rejected(self) -> None:
        with pytest.raises(ValueError):
            START.step_left()


class TestOnElement:
    """Тесты для OnElement"""

    def test_floor_equals_ceil(self) -> None:
        addr = OnElement(4)
        assert addr.value == 4.0
        assert addr.left == addr.right == 4

    def test_half_steps_return_to_gaps(self) -> None:
        assert OnElement(4).half_step_left() == Gap(4)
        assert OnElement(4).half_step_right() == Gap(5)

    def test_half_steps_are_inverse(self) -> None:
        for index in range(5):
            gap = Gap(index + 1)
            assert gap.half_step_left().half_step_right() == gap
            on = OnElement(index)
            assert on.half_step_right().half_step_left() == on

    def test_gap_and_on_element_never_equal(self) -> None:
        assert Gap(1) != OnElement(1)


class TestAddressFromValue:
    """Конверсия полуцелых значений"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (-0.5, Gap(0)),
            (0.5, Gap(1)),
            (2.5, Gap(3)),
            (0, OnElement(0)),
            (3.0, OnElement(3)),
        ],
    )
    def test_valid_values(self, value, expected) -> None:
        assert address_from_value(value) == expected
        assert address_from_value(value).value == value

    @pytest.mark.parametrize("value", [0.25, 1.1, float("nan"), float("inf"), -1.5, -1])
    def test_invalid_values(self, value) -> None:
        with pytest.raises(ValueError):
            address_from_value(value)
