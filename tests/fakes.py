import copy
from collections import Counter

from redis.exceptions import ConnectionError as RedisConnectionError

from bizdir.core.exceptions.errors import UpstreamError
from bizdir.utils.caching import Cache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakePlacesClient:
    """Stands in for PlacesClient; counts calls and serves canned payloads."""

    def __init__(self):
        self.search_results = []
        self.suggestion_results = []
        self.details = {}
        self.nearby_results = []
        self.legacy_details = {}
        self.failing = set()
        self.calls = Counter()
        self.nearby_args = []

    def _record(self, name: str):
        self.calls[name] += 1
        if name in self.failing:
            raise UpstreamError(detail=f"{name}: connection refused")

    async def text_search(self, query):
        self._record("text_search")
        return copy.deepcopy(self.search_results)

    async def suggestions(self, text, location=None):
        self._record("suggestions")
        return copy.deepcopy(self.suggestion_results)

    async def place_details(self, place_id):
        self._record("place_details")
        return copy.deepcopy(self.details[place_id])

    async def nearby_search(self, location, radius, place_type, keyword):
        self._record("nearby_search")
        self.nearby_args.append((location.as_param(), radius, place_type, keyword))
        return copy.deepcopy(self.nearby_results)

    async def legacy_place_details(self, place_id):
        self._record("legacy_place_details")
        return copy.deepcopy(self.legacy_details.get(place_id, {}))

    def photo_url(self, photo_name):
        return f"https://photos.test/{photo_name}?key=test-key"


def text_search_place(place_id: str, name: str, address: str = "KG 7 Ave, Kigali"):
    return {
        "id": place_id,
        "displayName": {"text": name},
        "formattedAddress": address,
        "location": {"latitude": -1.95, "longitude": 30.06},
        "types": ["cafe", "food"],
        "websiteUri": f"https://{place_id}.example.com",
    }


def nearby_place(place_id: str, name: str, lat: float, lng: float, types=None):
    return {
        "place_id": place_id,
        "name": name,
        "geometry": {"location": {"lat": lat, "lng": lng}},
        "types": types or ["establishment"],
    }


class StubRedis:
    """Just enough of ``redis.asyncio.Redis`` for the cache; ``down`` fails every call."""

    def __init__(self, down=False):
        self.down = down
        self.data = {}
        self.expiry = {}

    def _check(self):
        if self.down:
            raise RedisConnectionError("Connection refused")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value.encode()
        self.expiry[key] = ex

    async def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    async def scan_iter(self):
        self._check()
        for key in list(self.data):
            yield key.encode()



def redis_cache(stub: StubRedis, default_ttl: int = 3600) -> Cache:
    cache = Cache(cache_type="redis", default_ttl=default_ttl, redis_url="redis://stub")
    cache._redis = stub
    return cache
