# dronegate

dronegate is a small aiohttp gateway that sits between drones, a Redis broker
and web front-ends.

- **`/drone`** (WebSocket): drones send JSON text messages. The message goes
  unchanged to a Redis channel picked by its `TYPE` field. `0` goes to
  `drone_info` and `1` goes to `running_status`. A message with any other `TYPE`
  is logged and skipped. A message that is not a JSON object with a numeric
  `TYPE` closes the connection. Every payload published on the `coors` channel
  is sent to the connected drone.
- **`/frontend`** (WebSocket): front-ends get every payload published on the
  `drone_info` and `running_status` channels.
- **`/coords`** (HTTP): `POST` a body such as
  `{"coords": [[30.1, 120.2], [30.3, 120.4]]}`. The waypoints are published on
  `coors` as text, for example `[[30.1 120.2] [30.3 120.4]]`.

Replies to `/coords` are JSON with one structure:

```json
{"code": 200, "msg": "ok"}
```

An invalid body or any method other than `POST` gets code `400`.

## Installation

```
pip install .
```

The database connection uses the `mysql+pymysql` SQLAlchemy dialect. Install
the PyMySQL driver next to the package:

```
pip install pymysql
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Running

```
dronegate [--env-file .env] [--config-dir config] [--host 0.0.0.0] [--port 32223]
```

At startup the command:

1. loads the environment file (default `.env`). If the file is missing, it exits with status 1.
2. reads `db.yaml` (or `db.yml`) from the config directory, opens the MySQL
   connection pool and checks that the server answers. If this fails, it exits with status 1.
3. serves the gateway. By default it listens on `0.0.0.0:32223` and uses Redis at
   `redis://localhost:6379/0`.

Example `config/db.yaml`:

```yaml
database:
  dev:
    username: user
    password: password
    host: localhost
    port: 3306
    dbname: dronegate
```

## Library use

- `dronegate.gateway.create_app(broker_factory)` builds the aiohttp
  application. `broker_factory` is an async callable that returns a broker
  with `publish`, `subscribe` and `close`. It defaults to
  `dronegate.broker.connect`. `serve(host, port)` runs the application.
- `dronegate.broker.RedisBroker` wraps an async Redis client.
  `connect(url)` opens one and checks it with a ping.
- `dronegate.messages` has the telemetry models (`DroneData`,
  `GlobalPosition`, `Attitude`, `SysStatus`, `Motor`, `RunningStatus`,
  `Coordinates`), the enums `MessageType`, `DeliveryStatus`, `FlightMode`
  and `MavState`, and the helpers `decode_request`, `encode_result`,
  `channel_for` and `validate_mac_format`.
- `dronegate.middleware` has a per-client token-bucket `RateLimiter`. Its
  presets are `STRICT_CONFIG`, `MODERATE_CONFIG` and `LENIENT_CONFIG`.
  `rate_limit_middleware(config)` wraps an aiohttp handler. A rate-limited
  client gets `{"code": 604, ...}`. `cors(handler)` adds headers that allow
  any origin. `client_id(request)` gives the key used for each client.
- `dronegate.response.Code` and `message(code)` hold the response codes and their messages.
- `dronegate.db.load_config`, `DatabaseConfig` and `Database` set up the MySQL connection pool.
- `dronegate.logger` prints log lines tagged with time, level and call site.

```python
from dronegate.messages import validate_mac_format, Coordinates

validate_mac_format("00:00:5E:00:53:01")   # True
str(Coordinates.from_dict({"coords": [[1.0, 2.0], [3.0, 4.0]]}))  # '[[1 2] [3 4]]'
```

## What it does not do

- There is no authentication endpoint, and no user registration, login or password recovery.
- The rate limiter and the CORS wrapper are not attached to any route of the
  built-in application. They are only available for your own handlers.
- No tables or models are defined. The database pool is opened and checked at
  startup, and nothing reads from it or writes to it.
- There is no video stream relay.