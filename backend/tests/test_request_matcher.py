"""
MoveMate Backend — Request Matcher Unit Tests
==============================================

How:   find_candidate_requests is mocked; the matcher's own work (region
       post-filter, sort, slice, count) runs for real.

What we test:
    ✅ Seoul/SMALL request visible to a Seoul/SMALL driver
    ✅ Origins outside the driver's regions are dropped before counting
    ✅ Explicit region filter narrows further
    ✅ soonest vs recent ordering
    ✅ Page slicing and total_items
    ✅ validate_filters rejects moving types / regions outside the driver's scope
"""

import pytest

from movemate.exceptions import ForbiddenError
from movemate.models.enums import MovingType, RegionCode
from movemate.schemas.driver_request import DriverRequestFilters
from movemate.services.request_matcher import RequestMatcher, validate_filters

SEOUL = "서울시 강남구 역삼동"
SEONGNAM = "경기도 성남시 분당구"
BUSAN = "부산 해운대구"


class TestFindRequests:

    def setup_method(self):
        self.categories = [MovingType.SMALL]

    async def _find(self, repository, filters, regions=(RegionCode.SEOUL,)):
        matcher = RequestMatcher(repository)
        return await matcher.find_requests(7, filters, self.categories, list(regions))

    @pytest.mark.asyncio
    async def test_seoul_small_request_visible_by_default(
        self, mock_repository, make_request, make_candidate
    ):
        candidate = make_candidate(make_request(origin=SEOUL))
        mock_repository.find_candidate_requests.return_value = [candidate]

        result = await self._find(mock_repository, DriverRequestFilters())

        assert result.total_items == 1
        assert result.requests == [candidate]
        mock_repository.find_candidate_requests.assert_awaited_once()
        args = mock_repository.find_candidate_requests.await_args.args
        assert args[0] == 7
        assert args[2] == self.categories

    @pytest.mark.asyncio
    async def test_origin_outside_regions_excluded_from_items_and_total(
        self, mock_repository, make_request, make_candidate
    ):
        """'경기도 성남시' is not shown to a Seoul-only driver."""
        seoul = make_candidate(make_request(origin=SEOUL))
        mock_repository.find_candidate_requests.return_value = [
            seoul,
            make_candidate(make_request(origin=SEONGNAM)),
            make_candidate(make_request(origin="unknown place")),
        ]

        result = await self._find(mock_repository, DriverRequestFilters())

        assert result.total_items == 1
        assert result.requests == [seoul]

    @pytest.mark.asyncio
    async def test_explicit_region_filter(self, mock_repository, make_request, make_candidate):
        seoul = make_candidate(make_request(origin=SEOUL))
        busan = make_candidate(make_request(origin=BUSAN))
        mock_repository.find_candidate_requests.return_value = [seoul, busan]

        result = await self._find(
            mock_repository,
            DriverRequestFilters(region=RegionCode.BUSAN),
            regions=(RegionCode.SEOUL, RegionCode.BUSAN),
        )

        assert result.requests == [busan]
        assert result.total_items == 1

    @pytest.mark.asyncio
    async def test_soonest_orders_by_moving_date(
        self, mock_repository, make_request, make_candidate
    ):
        late = make_candidate(make_request(moving_day=30, created_day=1))
        early = make_candidate(make_request(moving_day=5, created_day=0))
        mock_repository.find_candidate_requests.return_value = [late, early]

        result = await self._find(mock_repository, DriverRequestFilters(sort="soonest"))

        assert result.requests == [early, late]

    @pytest.mark.asyncio
    async def test_recent_orders_by_created_at_desc(
        self, mock_repository, make_request, make_candidate
    ):
        older = make_candidate(make_request(moving_day=5, created_day=0))
        newer = make_candidate(make_request(moving_day=30, created_day=2))
        mock_repository.find_candidate_requests.return_value = [older, newer]

        result = await self._find(mock_repository, DriverRequestFilters(sort="recent"))

        assert result.requests == [newer, older]

    @pytest.mark.asyncio
    async def test_page_slice_after_filter(self, mock_repository, make_request, make_candidate):
        candidates = [make_candidate(make_request(moving_day=d)) for d in range(1, 6)]
        noise = make_candidate(make_request(origin=SEONGNAM, moving_day=0))
        mock_repository.find_candidate_requests.return_value = [noise] + candidates

        result = await self._find(mock_repository, DriverRequestFilters(page=2, page_size=2))

        assert result.total_items == 5
        assert result.requests == candidates[2:4]

    @pytest.mark.asyncio
    async def test_page_past_end_is_empty(self, mock_repository, make_request, make_candidate):
        mock_repository.find_candidate_requests.return_value = [
            make_candidate(make_request())
        ]

        result = await self._find(mock_repository, DriverRequestFilters(page=3, page_size=10))

        assert result.total_items == 1
        assert result.requests == []


class TestValidateFilters:

    def test_no_filters_pass(self):
        validate_filters(DriverRequestFilters(), [MovingType.SMALL], [RegionCode.SEOUL])

    def test_own_scope_passes(self):
        validate_filters(
            DriverRequestFilters(moving_type=MovingType.SMALL, region=RegionCode.SEOUL),
            [MovingType.SMALL],
            [RegionCode.SEOUL],
        )

    def test_region_outside_scope_forbidden(self):
        """A Seoul driver may not browse Gyeonggi."""
        with pytest.raises(ForbiddenError, match="GYEONGGI"):
            validate_filters(
                DriverRequestFilters(region=RegionCode.GYEONGGI),
                [MovingType.SMALL],
                [RegionCode.SEOUL],
            )

    def test_moving_type_outside_scope_forbidden(self):
        with pytest.raises(ForbiddenError, match="OFFICE"):
            validate_filters(
                DriverRequestFilters(moving_type=MovingType.OFFICE),
                [MovingType.SMALL],
                [RegionCode.SEOUL],
            )
