import asyncio
import itertools
import random

import pytest

from pullstream.async_streamer import FINISHED, AsyncProducer, AsyncStream
from pullstream.streamer import Stream

TEST_DATA = [1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89]
TEST_MAP1 = [('foo', 'bar'), ('dinkum', 'thinkum'), ('wyoming', 'knot'), ('dick', 'seaton')]
TEST_MAP2 = [
    {'name': 'peter', 'grade': 'A'},
    {'name': 'paul', 'grade': 'B'},
    {'name': 'jonathan', 'grade': 'D'},
]
TEST_OBJ1 = {'foo': 'bar', 'dinkum': 'thinkum', 'wyoming': 'knot', 'dick': 'seaton'}
TEST_ARR1 = ['foo', 'bar', 'dinkum', 'thinkum', 'wyoming', 'knot', 'dick', 'seaton']


async def arange(n=10):
    for k in range(n):
        yield k


async def async_plus_2(x):
    await asyncio.sleep(random.uniform(0, 0.002))
    return x + 2


class AsyncRecorder(AsyncProducer):
    def __init__(self, data):
        self._data = list(data)
        self.pulls = 0

    async def pull(self):
        self.pulls += 1
        await asyncio.sleep(0)
        if self._data:
            return self._data.pop(0)
        return FINISHED


@pytest.mark.asyncio
async def test_stream(delayed, delayed_puller):
    class A:
        def __init__(self):
            self.k = 0

        def __aiter__(self):
            return self

        async def __anext__(self):
            if self.k < 5:
                self.k += 1
                return self.k
            raise StopAsyncIteration

    class B:
        async def __aiter__(self):
            for x in [1, 2, 3]:
                yield x

    class C:
        def __init__(self):
            self.k = 0

        def pull(self):
            if self.k < 3:
                self.k += 1
                return self.k
            return FINISHED

    assert await AsyncStream(range(4)).to_array() == [0, 1, 2, 3]
    assert await AsyncStream(arange(3)).to_array() == [0, 1, 2]
    assert await AsyncStream(A()).to_array() == [1, 2, 3, 4, 5]
    assert await AsyncStream(B()).to_array() == [1, 2, 3]
    assert await AsyncStream(C()).to_array() == [1, 2, 3]
    assert await AsyncStream(['a', 'b', 'c']).to_array() == ['a', 'b', 'c']
    assert await AsyncStream(Stream([1, 2])).to_array() == [1, 2]
    assert await AsyncStream(AsyncStream([1, 2])).to_array() == [1, 2]
    assert await AsyncStream(delayed(TEST_DATA)).to_array() == TEST_DATA
    assert await AsyncStream(delayed_puller(TEST_DATA)).to_array() == TEST_DATA
    assert await AsyncStream(AsyncRecorder([1, None])).to_array() == [1, None]


def test_stream_bad_source():
    # Fails right away, without an event loop.
    with pytest.raises(TypeError):
        AsyncStream(3)
    with pytest.raises(TypeError):
        AsyncStream(None)


@pytest.mark.asyncio
async def test_of_from_object_empty():
    assert await AsyncStream.of(1, 1, 2, 3, 5).to_array() == [1, 1, 2, 3, 5]
    assert await AsyncStream.from_object(TEST_OBJ1).to_array() == TEST_MAP1
    assert await AsyncStream.empty().to_array() == []
    assert await AsyncStream.empty().join(',') == ''


@pytest.mark.asyncio
async def test_aiter(delayed):
    s = AsyncStream(delayed(TEST_DATA))
    assert await s.__anext__() == 1
    got = [x async for x in s]
    assert got == TEST_DATA[1:]
    with pytest.raises(StopAsyncIteration):
        await s.__anext__()
    assert await s.pull() is FINISHED


@pytest.mark.asyncio
async def test_clone(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).to_array() == TEST_DATA
    assert await AsyncStream(delayed([])).to_array() == []
    assert await AsyncStream(delayed(TEST_DATA)).collect() == TEST_DATA


@pytest.mark.asyncio
async def test_order_with_random_delays(delayed_puller):
    data = list(range(50))
    s = AsyncStream(delayed_puller(data, max_delay=0.003))
    assert await s.map(async_plus_2).filter(lambda x: x % 2 == 0).to_array() == [
        x + 2 for x in data if x % 2 == 0
    ]


@pytest.mark.asyncio
async def test_lazy():
    r = AsyncRecorder(range(5))
    s = (
        AsyncStream(r)
        .filter(lambda x: x > 0)
        .map(lambda x: [x])
        .flatten()
        .concat([9])
        .slice(1, 3)
        .entries()
        .push(8)
    )
    assert r.pulls == 0
    assert await s.to_array() == [(0, 2), (1, 3), 8]


@pytest.mark.asyncio
async def test_concat(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).concat(
        AsyncStream(delayed(TEST_DATA))
    ).to_array() == TEST_DATA + TEST_DATA
    assert await AsyncStream([]).concat(delayed(TEST_DATA)).to_array() == TEST_DATA
    assert await AsyncStream(delayed(TEST_DATA)).concat([]).to_array() == TEST_DATA
    assert await AsyncStream([1]).concat(Stream([2])).concat(arange(2)).to_array() == [
        1,
        2,
        0,
        1,
    ]


@pytest.mark.asyncio
async def test_concat_long_chain():
    s = AsyncStream([])
    for i in range(5000):
        s = s.push(i)
    assert await s.to_array() == list(range(5000))

    s = AsyncStream([0])
    for i in range(1, 5000):
        s = AsyncStream([i]).concat(s)
    assert await s.to_array() == list(range(4999, -1, -1))

    s = AsyncStream([1, 2]).push(3)
    assert await s.shift() == 1
    s = s.push(4).push(5)
    assert await s.to_array() == [2, 3, 4, 5]
    assert await s.pull() is FINISHED


@pytest.mark.asyncio
async def test_concat_does_not_revisit_first():
    r = AsyncRecorder([1, 2])
    s = AsyncStream(r).concat([3, 4])
    assert await s.to_array() == [1, 2, 3, 4]
    assert r.pulls == 3
    assert await s.pull() is FINISHED
    assert r.pulls == 3


@pytest.mark.asyncio
async def test_filter(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).filter(lambda e: e > 10).to_array() == [
        e for e in TEST_DATA if e > 10
    ]

    seen = []

    def pred(x, i):
        seen.append(i)
        return i % 2 == 1

    assert await AsyncStream([10, 20, 30, 40, 50]).filter(pred).to_array() == [20, 40]
    assert seen == [0, 1, 2, 3, 4]

    assert await AsyncStream(range(5)).filter(
        lambda x, i, ctx: x in ctx, {1, 3}
    ).to_array() == [1, 3]


@pytest.mark.asyncio
async def test_filter_async_predicate():
    async def is_even(x):
        await asyncio.sleep(0)
        return x % 2 == 0

    assert await AsyncStream(arange(7)).filter(is_even).to_array() == [0, 2, 4, 6]


@pytest.mark.asyncio
async def test_filter_long_skip():
    n = 50_000
    assert await AsyncStream(range(n)).filter(lambda x: x == n - 1).to_array() == [n - 1]


@pytest.mark.asyncio
async def test_map(delayed, call_counter):
    assert await AsyncStream(delayed(TEST_DATA)).map(lambda e: e * 10).to_array() == [
        e * 10 for e in TEST_DATA
    ]
    assert await AsyncStream('abc').map(lambda x, i: f'{i}{x}').to_array() == [
        '0a',
        '1b',
        '2c',
    ]
    assert await AsyncStream(range(3)).map(lambda x, i, ctx: x + ctx, 100).to_array() == [
        100,
        101,
        102,
    ]
    assert await AsyncStream(arange(5)).map(async_plus_2).to_array() == [2, 3, 4, 5, 6]

    f = call_counter(lambda x: x + 1)
    s = AsyncStream(arange(5)).map(f)
    assert f.calls == []
    assert await s.shift() == 1
    assert f.calls == [0]
    assert await s.to_array() == [2, 3, 4, 5]
    assert f.calls == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_filter_map(delayed):
    data = [1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89]
    s = AsyncStream(delayed(data)).filter(lambda e: e > 10).map(lambda e: e * 10)
    assert await s.to_array() == [130, 210, 340, 550, 890]


@pytest.mark.asyncio
async def test_entries(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).entries().to_array() == list(
        enumerate(TEST_DATA)
    )
    assert await AsyncStream('ab').concat('cd').entries().to_array() == [
        (0, 'a'),
        (1, 'b'),
        (2, 'c'),
        (3, 'd'),
    ]


@pytest.mark.asyncio
async def test_flatten(delayed):
    assert await AsyncStream(delayed(TEST_MAP1)).flatten().to_array() == TEST_ARR1
    assert await AsyncStream([[1, 2], [], [3]]).flatten().to_array() == [1, 2, 3]
    assert await AsyncStream([[], [], [1], [], []]).flatten().to_array() == [1]
    assert await AsyncStream([[], []]).flatten().to_array() == []
    assert await AsyncStream([]).flatten().to_array() == []
    assert await AsyncStream(
        [delayed([1, 2]), delayed([]), arange(0), Stream([3]), AsyncStream([4])]
    ).flatten().to_array() == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_flatten_many_empty_inner():
    s = AsyncStream(itertools.chain(itertools.repeat([], 20_000), [[1]])).flatten()
    assert await s.to_array() == [1]


@pytest.mark.asyncio
async def test_flatten_accessor(delayed):
    assert await AsyncStream(delayed(TEST_MAP2)).flatten(
        lambda x: [x['name'], x['grade']]
    ).to_array() == ['peter', 'A', 'paul', 'B', 'jonathan', 'D']

    async def expand(n):
        await asyncio.sleep(0)
        return delayed(range(n))

    assert await AsyncStream(range(4)).flatten(expand).to_array() == [0, 0, 1, 0, 1, 2]

    s = AsyncStream(itertools.count()).flatten(lambda n: range(n))
    assert await s.slice(0, 6).to_array() == [0, 0, 1, 0, 1, 2]


@pytest.mark.asyncio
async def test_flatten_bad_inner():
    with pytest.raises(TypeError):
        await AsyncStream([[1], 2]).flatten().to_array()


@pytest.mark.asyncio
async def test_slice(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).slice(2, 6).to_array() == TEST_DATA[2:6]
    assert await AsyncStream(TEST_DATA).slice(2).to_array() == TEST_DATA[2:]
    assert await AsyncStream(TEST_DATA).slice(6, 2).to_array() == []
    assert await AsyncStream(TEST_DATA).slice(len(TEST_DATA)).to_array() == []
    assert await AsyncStream(itertools.count()).slice(5, 8).to_array() == [5, 6, 7]

    r = AsyncRecorder(range(10))
    assert await AsyncStream(r).slice(1, 3).to_array() == [1, 2]
    assert r.pulls == 3


def test_slice_negative():
    s = AsyncStream(range(5))
    with pytest.raises(ValueError):
        s.slice(-1)
    with pytest.raises(ValueError):
        s.slice(0, -2)


@pytest.mark.asyncio
async def test_reduce(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).reduce(lambda z, e: z + e, 0) == sum(
        TEST_DATA
    )
    assert await AsyncStream(TEST_DATA).reduce(lambda z, e: z + e) == sum(TEST_DATA)
    assert await AsyncStream([]).reduce(lambda z, e: z + e, 5) == 5
    with pytest.raises(TypeError):
        await AsyncStream([]).reduce(lambda z, e: z + e)
    assert await AsyncStream('abc').reduce(lambda z, x, i: z + str(i)) == 'a12'

    async def add(z, x):
        await asyncio.sleep(0)
        return z + x

    assert await AsyncStream(arange(5)).reduce(add, 0) == 10


@pytest.mark.asyncio
async def test_every_some(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).every(lambda e: e < 100)
    assert not await AsyncStream(delayed(TEST_DATA)).every(lambda e: e < 50)
    assert await AsyncStream([]).every(lambda e: False)
    assert await AsyncStream(delayed(TEST_DATA)).some(lambda e: e == 13)
    assert not await AsyncStream(delayed(TEST_DATA)).some(lambda e: e == 6)
    assert await AsyncStream([1, None]).some(lambda e: e is None)


@pytest.mark.asyncio
async def test_find(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).find(lambda e: e == 13) == 13
    assert await AsyncStream(delayed(TEST_DATA)).find(lambda e: e == 7) is None
    assert await AsyncStream(TEST_DATA).find(lambda e: e == 7, default=-1) == -1
    assert await AsyncStream(delayed(TEST_DATA)).find_index(lambda e: e == 13) == 6
    assert await AsyncStream(delayed(TEST_DATA)).find_index(lambda e: e == 7) == -1

    async def big(e):
        return e > 20

    assert await AsyncStream(TEST_DATA).find(big) == 21


@pytest.mark.asyncio
async def test_short_circuit(delayed, call_counter):
    f = call_counter(lambda e: e == 5)
    assert await AsyncStream(delayed(TEST_DATA)).find(f) == 5
    assert f.calls == [1, 1, 2, 3, 5]

    f = call_counter(lambda e: e == 5)
    assert await AsyncStream(delayed(TEST_DATA)).find_index(f) == 4
    assert f.calls == [1, 1, 2, 3, 5]

    f = call_counter(lambda e: e == 3)
    assert await AsyncStream(delayed(TEST_DATA)).some(f)
    assert f.calls == [1, 1, 2, 3]

    f = call_counter(lambda e: e < 3)
    assert not await AsyncStream(delayed(TEST_DATA)).every(f)
    assert f.calls == [1, 1, 2, 3]


@pytest.mark.asyncio
async def test_for_each(delayed):
    visited = []
    z = await AsyncStream(delayed(TEST_DATA)).for_each(lambda e, i: visited.append((i, e)))
    assert z is None
    assert visited == list(enumerate(TEST_DATA))

    out = []

    async def save(e, i, ctx):
        await asyncio.sleep(0)
        ctx.append(e)

    await AsyncStream('ab').for_each(save, out)
    assert out == ['a', 'b']

    ticks = []
    await AsyncStream(arange(3)).for_each(lambda: ticks.append(1))
    assert ticks == [1, 1, 1]


@pytest.mark.asyncio
async def test_includes_index_of(delayed):
    assert await AsyncStream(delayed(TEST_DATA)).includes(13)
    assert not await AsyncStream(delayed(TEST_DATA)).includes(7)
    assert not await AsyncStream(delayed(TEST_DATA)).includes(13, 7)
    assert await AsyncStream(delayed(TEST_DATA)).index_of(13) == TEST_DATA.index(13)
    assert await AsyncStream(delayed(TEST_DATA)).index_of(13, 7) == -1
    assert await AsyncStream(delayed(TEST_DATA)).index_of(89, 3) == 10
    assert await AsyncStream([True]).includes(1)
    assert await AsyncStream([1.0, 2]).index_of(1) == 0


@pytest.mark.asyncio
async def test_join(delayed):
    assert await AsyncStream([]).join(',') == ''
    assert await AsyncStream([1]).join(',') == '1'
    assert await AsyncStream(delayed(TEST_DATA)).join(',') == ','.join(
        str(e) for e in TEST_DATA
    )


@pytest.mark.asyncio
async def test_push(delayed):
    expected = TEST_DATA + ['77', '88', '99']
    assert await AsyncStream(delayed(TEST_DATA)).push('77', '88', '99').to_array() == expected


@pytest.mark.asyncio
async def test_shift(delayed):
    s = AsyncStream(delayed(TEST_DATA))
    assert await s.shift() == TEST_DATA[0]
    assert await s.to_array() == TEST_DATA[1:]
    assert await s.shift() is None
    assert await s.shift(default=0) == 0


@pytest.mark.asyncio
async def test_to_map_object_values(delayed):
    z = await AsyncStream(delayed(TEST_MAP1)).to_map()
    assert list(z.items()) == TEST_MAP1

    z = await AsyncStream(delayed(TEST_MAP2)).to_map(lambda e: e['name'], lambda e: e['grade'])
    assert list(z.items()) == [(e['name'], e['grade']) for e in TEST_MAP2]

    assert await AsyncStream(delayed(TEST_MAP1)).to_object() == TEST_OBJ1
    assert await AsyncStream([(1, 'x')]).to_object() == {'1': 'x'}
    assert await AsyncStream(delayed(TEST_MAP1)).to_values() == [v for _, v in TEST_MAP1]


@pytest.mark.asyncio
async def test_callback_error(delayed):
    async def f(x):
        if x == 3:
            raise ValueError(x)
        return x

    with pytest.raises(ValueError):
        await AsyncStream(delayed(TEST_DATA)).map(f).to_array()
    with pytest.raises(ValueError):
        await AsyncStream(delayed(TEST_DATA)).filter(f).to_array()
    with pytest.raises(ValueError):
        await AsyncStream(delayed(TEST_DATA)).every(f)


@pytest.mark.asyncio
async def test_finished_is_sticky(delayed):
    s = (
        AsyncStream(delayed([[1], [], [2, 3]]))
        .flatten()
        .filter(lambda x: x > 1)
        .map(lambda x: x * 2)
        .concat([])
        .slice(0, 10)
    )
    assert await s.to_array() == [4, 6]
    for _ in range(3):
        assert await s.pull() is FINISHED

    s = AsyncStream(arange(2))
    assert await s.to_array() == [0, 1]
    assert await s.pull() is FINISHED
    assert await s.pull() is FINISHED
