import asyncio
import random

import pytest

from pullstream import FINISHED, Producer


class Recorder(Producer):
    '''
    A producer that counts how many times it has been pulled,
    including pulls after it has finished.
    '''

    def __init__(self, data):
        self._data = list(data)
        self.pulls = 0

    def pull(self):
        self.pulls += 1
        if self._data:
            return self._data.pop(0)
        return FINISHED


class Delayed:
    '''
    An async iterable that sleeps a little before yielding each element,
    like data arriving from the network.
    '''

    def __init__(self, data, delay=0.002):
        self.data = data
        self.delay = delay

    async def __aiter__(self):
        for x in self.data:
            await asyncio.sleep(self.delay)
            yield x


class DelayedPuller:
    '''
    An object with an async ``pull`` whose results arrive after random delays.
    It does not subclass any producer class.
    '''

    def __init__(self, data, max_delay=0.005):
        self._it = iter(data)
        self.max_delay = max_delay

    async def pull(self):
        await asyncio.sleep(random.uniform(0, self.max_delay))
        return next(self._it, FINISHED)


class CallCounter:
    '''
    A one-argument callback that records the values it's been called with.
    '''

    def __init__(self, func):
        self.func = func
        self.calls = []

    def __call__(self, x):
        self.calls.append(x)
        return self.func(x)


@pytest.fixture
def recorder():
    return Recorder


@pytest.fixture
def delayed():
    return Delayed


@pytest.fixture
def delayed_puller():
    return DelayedPuller


@pytest.fixture
def call_counter():
    return CallCounter
