# sproutnet

Building blocks for a datagram transport that forecasts how much the link can deliver and sends only that much.

## What is in the package

### Rate inference and forecasts

- `sproutnet.sampled.SampledFunction` holds one value per bin over a range of the real line. Lookups by position are clamped to the grid. `poisson_pdf(rate, counts)` gives the Poisson mass function.
- `sproutnet.process.Process` is a probability distribution over an unknown arrival rate:
  - `evolve(time)` lets the rate drift by Brownian motion and escape from an outage at rate zero.
  - `observe(time, counts)` conditions the distribution on an observed count of arrivals.
  - `normalize()`, `set_certain(rate)`, `count_probability(time, counts)` and `lower_quantile(x)` work on the distribution directly.
- `sproutnet.forecaster` builds arrival-count forecasts:
  - `ProcessForecastTick` covers a single tick.
  - `ProcessForecastInterval.build(...)` covers several ticks.
  - `ProcessForecastInterval.lower_quantile(ensemble, x)` returns the cautious count for a given rate distribution.
  - `to_model()` and `from_model(...)` save and restore a computed forecast as plain lists.
- `sproutnet.receiver` provides two classes:
  - `Receiver` follows arrivals tick by tick (20 ms) through `warp_to`, `advance_to` and `recv`. `forecast()` returns a `DeliveryForecast` with the 5% lower-quantile packet counts for the next 1 to 8 ticks.
  - `RecvQueue` counts the bytes received or given up as lost.

  Computing the eight interval forecasts takes a while. The result is cached once per process. You can load or save it as JSON with the `model_in` / `model_out` arguments or the `SPROUT_MODEL_IN` / `SPROUT_MODEL_OUT` environment variables. `DeliveryForecast.to_bytes()` and `from_bytes()` give a compact binary encoding.

### Clocks

`sproutnet.clock` provides:

- `timestamp()`: monotonic milliseconds.
- `timestamp16()`: 16-bit wire timestamps that never take the reserved all-ones value.
- `timestamp_diff(tsnew, tsold)`: the difference between two 16-bit timestamps, allowing for wrap-around.
- `SendQueue`: computes the throwaway window for each sent sequence number.

### Queueing

- `sproutnet.ingress`:
  - `TrackedPacket` is a payload with its entry time.
  - `IngressQueue` is a FIFO that keeps a running byte count.
  - `Qdisc` names the two disciplines, `CODEL` and `SPROUT`.
- `sproutnet.codel.CoDel` is controlled-delay active queue management: a 5 ms target over a 100 ms interval.
- `sproutnet.classifier` assigns an Ethernet frame to a flow by its IPv4 protocol number (`get_flow_id`). It also provides `get_eth_type` and `pkt_hash`.
- `sproutnet.queuegang.QueueGang` keeps one queue per flow and serves them by deficit round robin.
  - With `Qdisc.CODEL`, every flow runs through its own CoDel.
  - With `Qdisc.SPROUT`, total queued bytes are held under `qlimit` by dropping from the head of the longest queue.

### Framing

- `sproutnet.fragment`:
  - `Instruction` is a state-sync message with a binary encoding.
  - `Fragmenter` splits instructions into fragments that fit an MTU.
  - `Fragment` encodes and decodes a single fragment.
  - `FragmentAssembly` puts the fragments back together.
- `sproutnet.reassembly.Reassembly` rebuilds `PacketFragment` pieces into 1600-byte buffers by hole tracking (RFC 815).
- `sproutnet.forecastpacket.ForecastPacket` puts an optional `DeliveryForecast` in front of a payload.
- `sproutnet.compressor` provides `compress` and `uncompress` with zlib, limited to 4 MiB of output.
- `sproutnet.mac`:
  - `MACAddress` holds an address. `matches` treats broadcast on either side as a match.
  - `parse_human` parses `aa:bb:cc:dd:ee:ff` text. Empty text gives the broadcast address.

## What the package does not do

The package opens no sockets and does no encryption. It has no connection object that sends or receives datagrams, and no sender or receiver loop for state synchronisation. It provides no command-line program. To build a working transport, combine these parts with your own socket handling.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Examples

A forecast from the rate model:

```python
from sproutnet.process import Process
from sproutnet.forecaster import ProcessForecastInterval

process = Process(1000, 200, 1, 256)
forecast = ProcessForecastInterval.build(0.02, process, 30, 1)

process.observe(0.02, 10)
process.normalize()
print(forecast.lower_quantile(process, 0.05))
```

A CoDel-managed queue:

```python
from sproutnet.ingress import IngressQueue
from sproutnet.codel import CoDel

queue = IngressQueue()
codel = CoDel()
codel.enque(queue, b"payload")
packet = codel.deque(queue)
print(packet.contents)
```

Fragmenting and reassembling an instruction:

```python
from sproutnet.fragment import Fragment, FragmentAssembly, Fragmenter, Instruction

inst = Instruction(old_num=0, new_num=1, diff=b"x" * 3000)
assembly = FragmentAssembly()
for frag in Fragmenter().make_fragments(inst, 1480):
    done = assembly.add_fragment(Fragment.from_bytes(frag.to_bytes()))
assert done and assembly.get_assembly() == inst
```