"""Static region tables and the region resolver."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel

from .exceptions import UnsupportedRegion

NATIONWIDE_DATASET_ID = "F-D0047-091"

# One-week township forecast dataset for each city/county.
CITY_DATASET_IDS: Mapping[str, str] = MappingProxyType(
    {
        "宜蘭縣": "F-D0047-003",
        "桃園市": "F-D0047-007",
        "新竹縣": "F-D0047-011",
        "苗栗縣": "F-D0047-015",
        "彰化縣": "F-D0047-019",
        "南投縣": "F-D0047-023",
        "雲林縣": "F-D0047-027",
        "嘉義縣": "F-D0047-031",
        "屏東縣": "F-D0047-035",
        "臺東縣": "F-D0047-039",
        "花蓮縣": "F-D0047-043",
        "澎湖縣": "F-D0047-047",
        "基隆市": "F-D0047-051",
        "新竹市": "F-D0047-055",
        "嘉義市": "F-D0047-059",
        "臺北市": "F-D0047-063",
        "高雄市": "F-D0047-067",
        "新北市": "F-D0047-071",
        "臺中市": "F-D0047-075",
        "臺南市": "F-D0047-079",
        "連江縣": "F-D0047-083",
        "金門縣": "F-D0047-087",
    }
)

# Representative district (seat or busiest district) used as locationName.
CITY_DISTRICTS: Mapping[str, str] = MappingProxyType(
    {
        "基隆市": "仁愛區",
        "臺北市": "信義區",
        "新北市": "板橋區",
        "桃園市": "桃園區",
        "新竹市": "東區",
        "新竹縣": "竹北市",
        "苗栗縣": "苗栗市",
        "臺中市": "西屯區",
        "彰化縣": "彰化市",
        "南投縣": "南投市",
        "雲林縣": "斗六市",
        "嘉義市": "東區",
        "嘉義縣": "太保市",
        "臺南市": "安平區",
        "高雄市": "苓雅區",
        "屏東縣": "屏東市",
        "宜蘭縣": "宜蘭市",
        "花蓮縣": "花蓮市",
        "臺東縣": "臺東市",
        "澎湖縣": "馬公市",
        "金門縣": "金城鎮",
        "連江縣": "南竿鄉",
    }
)


class ResolvedRegion(BaseModel):
    """Upstream coordinates for one region key."""

    city: str
    dataset_id: str
    district: str
    degraded: bool = False


class RegionResolver:
    """Maps region keys to a dataset id and the district to extract from it."""

    def __init__(
        self,
        *,
        dataset_ids: Mapping[str, str] = CITY_DATASET_IDS,
        districts: Mapping[str, str] = CITY_DISTRICTS,
        fallback_dataset_id: str | None = NATIONWIDE_DATASET_ID,
        logger: logging.Logger | None = None,
    ) -> None:
        self._dataset_ids = MappingProxyType(dict(dataset_ids))
        self._districts = MappingProxyType(dict(districts))
        self._fallback_dataset_id = fallback_dataset_id
        self.logger = logger or logging.getLogger(__name__)

    def supported_regions(self) -> list[str]:
        """Return the region keys this resolver can serve, in table order."""
        return [
            key
            for key in self._districts
            if key in self._dataset_ids or self._fallback_dataset_id is not None
        ]

    def resolve(self, region_key: str) -> ResolvedRegion:
        """Resolve a region key, raising UnsupportedRegion when it is unknown."""
        district = self._districts.get(region_key)
        if district is None:
            raise UnsupportedRegion(region_key, supported=self.supported_regions())

        dataset_id = self._dataset_ids.get(region_key)
        if dataset_id is not None:
            return ResolvedRegion(city=region_key, dataset_id=dataset_id, district=district)

        if self._fallback_dataset_id is None:
            raise UnsupportedRegion(region_key, supported=self.supported_regions())

        self.logger.warning(
            "No dataset configured for %s; falling back to nationwide dataset %s",
            region_key,
            self._fallback_dataset_id,
        )
        return ResolvedRegion(
            city=region_key,
            dataset_id=self._fallback_dataset_id,
            district=district,
            degraded=True,
        )
