import math

import pytest

from mipscache.cache import (
    BLOCK_WORDS,
    MISS_CYCLES,
    CacheLine,
    CacheStats,
    DirectMappedCache,
    FullyAssociativeCache,
)
from mipscache.memory import Memory


def _memory(words=4096):
    memory = Memory(words)
    memory.load_words(range(words))
    return memory


def test_hit_rate_nan_without_accesses():
    rate = CacheStats().hit_rate()
    assert str(rate) == "nan"
    assert math.isnan(rate)


def test_hit_rate_percentage():
    assert CacheStats(hits=1, misses=1).hit_rate() == 50.0
    assert CacheStats(hits=3, misses=0).hit_rate() == 100.0


def test_cache_line_defaults():
    line = CacheLine()
    assert line.data == [0] * BLOCK_WORDS
    assert not line.valid and not line.dirty


@pytest.mark.parametrize("cls", [FullyAssociativeCache, DirectMappedCache])
def test_miss_then_hit(cls):
    cache = cls(_memory())
    assert cache.read(8) == 2
    assert (cache.stats.hits, cache.stats.misses, cache.stats.cycles) == (0, 1, 1000)
    assert cache.read(12) == 3
    assert (cache.stats.hits, cache.stats.misses, cache.stats.cycles) == (1, 1, 1001)
    assert MISS_CYCLES == 1000


@pytest.mark.parametrize("cls", [FullyAssociativeCache, DirectMappedCache])
def test_reads_match_memory(cls):
    memory = _memory()
    cache = cls(memory)
    for address in range(0, 4096, 36):
        assert cache.read(address) == memory[address // 4]


@pytest.mark.parametrize("cls", [FullyAssociativeCache, DirectMappedCache])
def test_write_stays_in_cache_until_evicted(cls):
    memory = _memory()
    cache = cls(memory)
    cache.write(4, -7)
    assert cache.read(4) == -7
    assert memory[1] == 1


@pytest.mark.parametrize("cls", [FullyAssociativeCache, DirectMappedCache])
def test_write_wraps_value(cls):
    cache = cls(_memory())
    cache.write(0, 0xFFFFFFFF)
    assert cache.read(0) == -1


def test_fully_associative_writes_back_on_eviction():
    memory = _memory()
    cache = FullyAssociativeCache(memory, lines=2)
    cache.write(0, 99)
    cache.read(64)
    cache.read(128)
    assert memory[0] == 99
    assert cache.stats.misses == 3


def test_fully_associative_second_chance():
    memory = _memory()
    cache = FullyAssociativeCache(memory, lines=2)
    cache.read(0)
    cache.read(0)
    cache.read(64)
    cache.read(128)
    hits_before = cache.stats.hits
    cache.read(0)
    assert cache.stats.hits == hits_before + 1
    cache.read(64)
    assert cache.stats.misses == 4


def test_fully_associative_rejects_zero_lines():
    with pytest.raises(ValueError):
        FullyAssociativeCache(_memory(), lines=0)


def test_fully_associative_default_lines():
    assert len(FullyAssociativeCache(_memory()).lines) == 64


def test_direct_mapped_placement():
    cache = DirectMappedCache(_memory())
    cache.read(64 * 5)
    assert cache.lines[5].valid
    assert cache.lines[5].tag == 0
    cache.read(128 * 64)
    assert cache.lines[0].valid
    assert cache.lines[0].tag == 1


def test_direct_mapped_conflict_writes_back():
    memory = _memory()
    cache = DirectMappedCache(memory)
    cache.write(0, 55)
    assert cache.read(128 * 64) == memory[128 * 16]
    assert memory[0] == 55
    assert cache.stats.misses == 2


def test_direct_mapped_separate_lines_coexist():
    cache = DirectMappedCache(_memory())
    cache.read(0)
    cache.read(64)
    cache.read(0)
    cache.read(64)
    assert (cache.stats.hits, cache.stats.misses) == (2, 2)


@pytest.mark.parametrize("lines", [0, 3, 100])
def test_direct_mapped_requires_power_of_two(lines):
    with pytest.raises(ValueError):
        DirectMappedCache(_memory(), lines=lines)


@pytest.mark.parametrize("cls", [FullyAssociativeCache, DirectMappedCache])
def test_address_beyond_memory_raises(cls):
    cache = cls(Memory(64))
    with pytest.raises(IndexError):
        cache.read(64 * 4 * 4)