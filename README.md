# mpcircuit

Building blocks for writing Boolean circuits that run on a pluggable
execution backend, as used in secure two-party computation, together with
readers for Bristol circuit files, AES-128 in counter mode, and byte
channels over memory, files and TCP.

## Modules

- `mpcircuit.execution`: the abstract gate backend `CircuitExecution`
  (`and_gate`, `xor_gate`, `not_gate`, `public_label`) and the abstract
  input/output backend `ProtocolExecution` (`feed`, `reveal`). `Party`
  names `PUBLIC`, `ALICE` and `BOB`. `PlainCircuitExecution` and
  `PlainProtocolExecution` evaluate everything in the clear, with each
  label being 0 or 1. The active pair is stored per context: install it
  with `set_execution(circ, prot)`, or for a `with` block with
  `use_execution(circ, prot)`. `plain_execution()` is a context manager
  that installs the plain pair. `circuit_execution()` and
  `protocol_execution()` return the active backends and raise
  `RuntimeError` when none is installed.
- `mpcircuit.bit`: `Bit` is one wire. It supports `&`, `|`, `^` and `~`,
  and also `equal`, `not_equal`, `select`, `reveal`, `reveal_str` and
  `Bit.from_label`. A `Bit` has no truth value, so `bool(bit)` raises
  `TypeError`. `Comparable` builds `ge`, `lt`, `le`, `gt`, `eq`, `ne` and
  the `>=`, `<`, `<=`, `>` operators from `geq` and `equal`.
- `mpcircuit.integer`: `Integer` is a fixed-width two's-complement list of
  bits, stored least significant first.
  - Constructors: `from_int`, `from_bytes`, `from_bools`.
  - Arithmetic: `+`, `-`, unary `-`, `*`, and signed `//` (truncates
    toward zero) and `%` (takes the sign of the dividend).
  - Bitwise: `&`, `|`, `^`.
  - Shifts: `<<` and `>>`, by a plain `int` or by a secret `Integer`.
  - Other methods: `select`, `abs`, `resize`, `mod_exp`, `leading_zeros`
    and `hamming_weight`.
  - Revealing: `reveal` (unsigned), `reveal_signed`, `reveal_str`,
    `reveal_bools` and `reveal_bytes`.
  - The module-level helpers `add_full`, `sub_full`, `mul_full`,
    `div_full`, `if_then_else` and `cond_neg` work on lists of bits.
- `mpcircuit.circuit_file`: `BristolFormat` (two input groups) and
  `BristolFashion` (grouped inputs and outputs). Both are parsed from text
  with `parse` or from a file with `from_file`, and evaluated with
  `compute`. `BristolFormat.to_file` writes the circuit out as C array
  definitions. `execute_circuit` runs a list of `(in1, in2, out, kind)`
  gates, with the kinds given by `GateType`.
- `mpcircuit.aes_ctr`: `aes_128_ctr(key, iv, data, length, start_chunk)`
  encrypts in the clear, or returns key stream when `data` is `None`.
  `AES128CTRCalculator(circuit).encrypt(...)` evaluates AES-CTR inside a
  circuit. The key and IV can each be public bytes or 128 circuit bits.
  `reverse_bytes` maps bit positions between the two byte orders.
- `mpcircuit.channel`: the `IOChannel` base class (`send_data`,
  `recv_data`, `send_block`, `recv_block`, `send_bool`, `recv_bool`,
  `flush`, `close`, usable as a context manager) and the `pack_bools` /
  `unpack_bools` wire encoding.
- `mpcircuit.memio`: `MemIO` (an in-memory buffer read back in order) and
  `FileIO` (one file, with `reset` to rewind).
- `mpcircuit.netio`: `NetIO` is a buffered TCP channel; pass
  `address=None` to listen. `HighSpeedNetIO` uses one TCP connection per
  direction, through `SenderSubChannel` and `RecverSubChannel`.

## Example

```python
from mpcircuit.execution import Party, plain_execution
from mpcircuit.integer import Integer

with plain_execution():
    a = Integer.from_int(32, 1234, Party.ALICE)
    b = Integer.from_int(32, -56, Party.BOB)
    print((a * b).reveal_signed(Party.PUBLIC))   # -69104
    print((a >= b).reveal(Party.PUBLIC))         # True
```

## What it does not do

- The only execution backends included are the plain, in-the-clear ones.
  Garbling or any other secure protocol has to be provided as your own
  `CircuitExecution` and `ProtocolExecution` subclasses.
- No AES circuit file ships with the package. You must load a
  256-input, 128-output Bristol Fashion AES circuit yourself and pass it
  to `AES128CTRCalculator`.
- There is no command-line program. The package is a library only.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```