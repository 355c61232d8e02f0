import time

from pullstream import Stream

DATA = [1, 1, 2, 3, 5, 8, 13, 21, 34, 55, 89]
NX = 200


def plain_concat():
    t0 = time.perf_counter()
    for _ in range(500):
        result = []
        for _ in range(NX):
            result = result + DATA
    t1 = time.perf_counter()
    print('time elapsed:', t1 - t0)
    return result


def streamed_concat():
    t0 = time.perf_counter()
    for _ in range(500):
        s = Stream([])
        for _ in range(NX):
            s = s.concat(Stream(DATA))
    result = s.to_array()
    t1 = time.perf_counter()
    print('time elapsed:', t1 - t0)
    return result


def plain_chain(data):
    t0 = time.perf_counter()
    for _ in range(200):
        result = [e * 10 for e in [e for e in data if e < 50]]
    t1 = time.perf_counter()
    print('time elapsed:', t1 - t0)
    return result


def streamed_chain(data):
    t0 = time.perf_counter()
    for _ in range(200):
        result = Stream(data).filter(lambda e: e < 50).map(lambda e: e * 10).to_array()
    t1 = time.perf_counter()
    print('time elapsed:', t1 - t0)
    return result


print('plain concat')
a = plain_concat()
print('')
print('streamed concat')
b = streamed_concat()
assert a == b
# Building the streams is cheap; only the last one is consumed.

big = DATA * NX
print('')
print('plain filter-map')
a = plain_chain(big)
print('')
print('streamed filter-map')
b = streamed_chain(big)
assert a == b
# Each element makes one trip through the chain; no intermediate list is built.
