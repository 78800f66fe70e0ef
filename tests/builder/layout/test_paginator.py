"""
Unit tests for the greedy paginator.
"""

import random

import pytest

from paper_studio.builder.layout import Block, MeasuredBlock, paginate


def blocks_with_heights(heights):
    return [MeasuredBlock(Block(i, f"<p>{i}</p>"), h) for i, h in enumerate(heights)]


def partition(result):
    return [[b.height for b in page.blocks] for page in result.pages]


class TestPaginate:
    """Greedy packing behaviour."""

    def test_when_third_block_overflows_then_new_page_started(self):
        # Arrange
        blocks = blocks_with_heights([200, 300, 400, 150])

        # Act
        result = paginate(blocks, 700)

        # Assert
        assert partition(result) == [[200, 300], [400, 150]]
        assert [p.index for p in result.pages] == [0, 1]
        assert result.warnings == []

    def test_when_block_exactly_fills_page_then_kept_on_page(self):
        result = paginate(blocks_with_heights([300, 400, 1]), 700)

        assert partition(result) == [[300, 400], [1]]

    def test_when_no_blocks_then_no_pages(self):
        result = paginate([], 700)

        assert result.page_count == 0
        assert result.pages == ()

    def test_when_capacity_not_positive_then_raises(self):
        with pytest.raises(ValueError):
            paginate(blocks_with_heights([10]), 0)

    def test_when_block_taller_than_capacity_then_alone_on_own_page(self):
        result = paginate(blocks_with_heights([100, 900, 50]), 700)

        assert partition(result) == [[100], [900], [50]]
        assert result.pages[1].overflows(700)
        assert len(result.warnings) == 1
        assert "Block 1" in result.warnings[0]

    def test_when_first_block_oversize_then_no_empty_page_before_it(self):
        result = paginate(blocks_with_heights([900, 50]), 700)

        assert partition(result) == [[900], [50]]


class TestPaginateProperties:
    """Properties that must hold for any block sequence."""

    @pytest.fixture
    def random_heights(self):
        rng = random.Random(1234)
        return [[rng.uniform(5, 400) for _ in range(rng.randint(1, 60))] for _ in range(25)]

    def test_when_any_input_then_pages_within_capacity(self, random_heights):
        for heights in random_heights:
            result = paginate(blocks_with_heights(heights), 700)
            for page in result.pages:
                assert page.block_count >= 1
                assert page.height_used <= 700 or page.block_count == 1

    def test_when_flattened_then_original_order(self, random_heights):
        for heights in random_heights:
            blocks = blocks_with_heights(heights)
            result = paginate(blocks, 700)
            assert result.flatten() == blocks

    def test_when_run_twice_then_identical(self, random_heights):
        for heights in random_heights:
            blocks = blocks_with_heights(heights)
            assert paginate(blocks, 650) == paginate(blocks, 650)

    def test_when_capacity_decreases_then_page_count_never_decreases(self, random_heights):
        for heights in random_heights:
            blocks = blocks_with_heights(heights)
            counts = [paginate(blocks, cap).page_count for cap in (1200, 900, 700, 500, 400, 300)]
            assert counts == sorted(counts)
