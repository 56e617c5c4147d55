# kvpatterns

A small toolkit of stability and concurrency patterns, and a key-value
service built on top of them that keeps its data in an append-only
transaction log.

Python 3.10 or later, no third-party dependencies.

```
pip install kvpatterns
```

## Running the service

```
kvpatterns-service [--host HOST] [--port PORT] [--log FILE]
```

This starts an HTTP server (port 8080 and the file `transactions.log` in the
working directory by default). On start-up it replays the transaction log,
restoring every key that was stored before, and then appends each new change
to it. Requests are logged at INFO level with their method and URI.

| Request             | Effect                                        | Response            |
|---------------------|-----------------------------------------------|---------------------|
| `PUT /v1/{key}`     | stores the request body as the key's value    | `201 Created`       |
| `GET /v1/{key}`     | returns the value                             | `200`, or `404 no such key` |
| `DELETE /v1/{key}`  | removes the key (missing keys are fine)       | `200`               |
| any other method on `/v1/{key}`, anything on `/v1` |                  | `405 Not Allowed`   |
| any other path      |                                               | `404`               |

```
curl -X PUT -d 'hello' http://localhost:8080/v1/greeting
curl http://localhost:8080/v1/greeting
curl -X DELETE http://localhost:8080/v1/greeting
```

The service is a plain WSGI application, `kvpatterns.service.KeyValueService`,
so it can be mounted in any WSGI server. Its constructor takes a
`KeyValueStore` and, optionally, a transaction logger that records every
successful put and delete. `kvpatterns.service.initialize_transaction_log(store, logger)`
replays a log into a store, starts the logger and returns the number of
events replayed; a read failure is raised after the logger has been started.

A minimal greeting server is available too:

```
kvpatterns-hello [--host HOST] [--port PORT]
```

It answers every path (port 8080 by default) with `Hello net/http!`; the WSGI
callable behind it is `kvpatterns.hello.hello_app`.

## The transaction log

`kvpatterns.transact.FileTransactionLogger` implements the abstract
`TransactionLogger` and writes one line per change:

```
<sequence>\t<event type>\t<key>\t<value>
```

The sequence number starts at 1 and grows by one per event; the event type is
`1` (`EventType.DELETE`) or `2` (`EventType.PUT`); the value is URL
query-escaped. Reading a log whose sequence numbers do not increase, whose
lines are malformed, or whose values cannot be decoded raises
`TransactionLogError`, as does a file that cannot be opened.

```python
from kvpatterns.transact import FileTransactionLogger

with FileTransactionLogger("transactions.log") as logger:
    for event in logger.read_events():
        print(event.sequence, event.event_type, event.key, event.value)
    logger.run()
    logger.write_put("my-key", "my-value")
    logger.write_delete("my-key")
    logger.wait()
    print(logger.last_sequence())   # 2 on a fresh file
```

Writes are queued and handled by a background worker started by `run()`;
writing before `run()` raises `RuntimeError`. `wait()` blocks until
everything queued so far is written, and `close()` (or leaving the `with`
block) waits, stops the worker and closes the file. Write failures are put on
the queue returned by `errors()`.

## The store

```python
from kvpatterns.store import KeyValueStore, NoSuchKey

store = KeyValueStore()
store.put("alpha", "1")
store.get("alpha")       # "1"
store.delete("alpha")
store.get("alpha")       # raises NoSuchKey (a KeyError)
```

The store is safe to share between threads.

## Sharded map

`kvpatterns.sharding.ShardedMap` spreads keys over a fixed number of
independently locked shards. The shard is chosen from one byte of the key's
SHA-1 digest, so at most 256 shards are ever used. At least one shard is
required.

```python
from kvpatterns.sharding import ShardedMap

m = ShardedMap(17)
m.set("alpha", 1)
m.get("alpha")      # 1
m.get("missing")    # None
m.keys()            # ["alpha"]
m.delete("alpha")
```

## Stability patterns

All of these wrap a callable that takes a context and returns a string, and
return a callable of the same shape. Contexts come from
`kvpatterns.cancellation`: `background()`, `with_cancel(parent)` and
`with_timeout(parent, seconds)`. A `Context` can be cancelled, waited on and
asked whether it is `done()` and for its `error()`: `ContextCanceled` after
cancellation, `DeadlineExceeded` after expiry.

- `circuitbreaker.breaker(circuit, failure_threshold)` — after
  `failure_threshold` consecutive failures, calls are refused with
  `ServiceUnreachable` until a back-off of two seconds, doubled with every
  further failure, has passed since the last attempt; a success closes the
  circuit again.
- `debounce.debounce_first(circuit, duration)` — a call goes through, and
  calls within `duration` seconds of the previous call get its result (or
  error) replayed.
- `debounce.debounce_last(circuit, duration)` — the circuit runs once calls
  have stopped for `duration` seconds; each caller gets the result of the
  latest completed run, an empty string before the first.
- `retry.retry(effector, retries, delay)` — retries a failing call up to
  `retries` times, `delay` seconds apart, raising the last error, or the
  context's error if the context ends during a delay.
- `throttle.throttle(effector, max_tokens, refill, interval)` — a token
  bucket holding at most `max_tokens`, refilled by `refill` every `interval`
  seconds from the first call until that call's context ends; calls without
  a token raise `TooManyCalls`, calls with a finished context raise its error.

```python
from kvpatterns.cancellation import background
from kvpatterns.circuitbreaker import ServiceUnreachable, breaker

def fetch(ctx):
    ...  # talk to a downstream service, raise on failure
    return "ok"

guarded = breaker(fetch, 3)
try:
    guarded(background())
except ServiceUnreachable:
    pass  # the circuit is open; try again later
```

## Futures

`kvpatterns.future.Future(func, *args)` runs `func(*args)` on a background
thread; `result()` blocks until it finishes and returns the same value, or
raises the same error, to every caller. `kvpatterns.future.slow_function(ctx)`
returns a future for two seconds of work that resolves to
`"I slept for 2 seconds"`, or raises the context's error if the context is
cancelled or times out first.

## What it does not do

The transaction log is kept only in a local file; there is no
database-backed logger. The servers are the standard library's single-threaded
WSGI reference server, without TLS or authentication.