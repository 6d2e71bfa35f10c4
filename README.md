# stashkit

Small, dependency-free building blocks for keeping data in single files on
disk, watching a file for changes, and describing the state of telemetry
variables.

## What is inside

| Module | Purpose |
| --- | --- |
| `stashkit.diskmap` | Immutable key/value file. Keys may repeat; reads go to disk through an in-memory index. |
| `stashkit.diskslice` | Immutable array of byte strings in one file, readable by position without loading it. |
| `stashkit.diskstack` | A LIFO stack kept in a single file that grows and shrinks with each push and pop. |
| `stashkit.versioninfo` | The version header written at the start of a disk stack file. |
| `stashkit.reverse` | A stream wrapper that writes bytes reversed and reads them back to front. |
| `stashkit.redblack` | A red-black tree with integer and string keys. |
| `stashkit.filewatcher` | Watch one file, routed by a marker such as `local:`. |
| `stashkit.localwatch` | The `local:` implementation for the file watcher, based on polling. |
| `stashkit.river.data` | `VarType` and the immutable `VarState` snapshot of a variable. |
| `stashkit.river.actions` | `Action` values describing changes to a `VarState`. |
| `stashkit.river.modifiers` | `var_state_mod`, the function that applies an action to a state. |
| `stashkit.river.transport` | Messages and the `RiverTransport` interface between an application and a monitor. |

Install with the test extra to run the tests: `pip install -e .[test]`, then
`pytest`.

## Disk map

A map file is written once and then opened for reading.

```python
from stashkit.diskmap import DiskMapWriter, DiskMapReader, KeyNotFoundError

with DiskMapWriter("words.map") as writer:
    writer.write(b"hello", b"world")
    writer.write(b"hello", b"again")

with DiskMapReader("words.map") as reader:
    print(reader.read(b"hello"))        # b"again": the last value written wins
    print(reader.read_all(b"hello"))    # [b"world", b"again"]
    for kv in reader.items():           # each distinct key, last value
        print(kv.key, kv.value)
    try:
        reader.read(b"missing")
    except KeyNotFoundError:
        pass
```

`read_all` returns an empty list for a missing key. `new(path)` and
`open_map(path)` are shorthands for the two constructors.

The file starts with a 64-byte header holding the index offset and the
number of entries, followed by the values and then the index; all numbers
are little-endian signed 64-bit integers.

## Disk slice

```python
import zlib
from stashkit.diskslice import SliceWriter, SliceReader

with SliceWriter("items.slice", intercept=zlib.compress) as writer:
    for word in (b"alpha", b"beta", b"gamma"):
        writer.write(word)

with SliceReader("items.slice", intercept=zlib.decompress, cache_index=True) as reader:
    print(len(reader))      # 3
    print(reader.read(1))   # b"beta"
    for item in reader.range(0, -1):
        print(item.index, item.value)
```

The optional `intercept` functions transform each value on the way in and
out, typically for compression. `cache_index=True` keeps the data offsets in
memory, trading memory for fewer disk reads.

`read` raises `IndexError` for a position outside the slice. `range(start,
end)` covers `start` up to but not including `end`; a negative `end` means
the end of the slice, and a negative `start` or an `end` past the length
raises `ValueError`.

## Disk stack

```python
from stashkit.diskstack import DiskStack, StackEmpty

with DiskStack("numbers.stack", int) as stack:
    for n in range(10):
        stack.push(n)
    print(stack.pop())   # 9
    print(len(stack))    # 9
    print(stack.size())  # bytes on disk, header included
```

Values are stored with `pickle` and must all be of the stack's type (a type,
or a sample value of it); pushing anything else raises `TypeError`. The file
must not exist unless `use_existing=True` is passed, in which case every
entry is checked as the file is opened. `flush=False` skips syncing to disk
after each operation. Popping an empty stack raises `StackEmpty`; pushing
past `max_depth` raises `StackFull`.

Each file begins with a `VersionInfo` header (`stashkit.versioninfo`);
files with a newer format version are refused with `ValueError`.

## Reverse stream

```python
import io
from stashkit.reverse import Reverse

buf = io.BytesIO()
rev = Reverse(buf)
rev.write(b"hello world")   # stored as b"dlrow olleh"
print(rev.read(5))          # b"world": reads the 5 bytes before the position
```

`read` returns `b""` once the start of the stream is reached.

## Red-black tree

```python
from stashkit.redblack import RedBlackTree, IntKey

tree = RedBlackTree()
for n in (10, 5, 15):
    tree.insert(IntKey(n), str(n))
print(len(tree))        # 3
print(tree.root.key)    # IntKey(value=10)
```

Keys are `IntKey` or `StrKey`; equal keys are kept as separate nodes.
`left_rotate` and `right_rotate` are public for working on the tree's
`Node` objects directly.

## File watcher

```python
from stashkit import filewatcher, localwatch

localwatch.install()
contents, stop = filewatcher.get("local:/path/to/file", None)
print(contents.get())   # current content
print(contents.get())   # content after the next change
stop()                  # the queue then receives None
```

`install()` may be called more than once. Other file systems can be served
by registering a `Watch` implementation with `filewatcher.register`. The
local watcher checks files every `localwatch.POLL_INTERVAL` seconds for a
change of size, modification time or identity.

## Telemetry state

```python
from stashkit.river import actions
from stashkit.river.data import VarState, VarType
from stashkit.river.modifiers import var_state_mod

state = VarState(name="requests")
state = var_state_mod(state, actions.int_add(3))
print(state.type is VarType.INT, state.value())   # True 3
```

`var_state_mod` never changes the state it is given; map actions copy the
map. `stashkit.river.transport` defines `Operation`, `Subscribe`, `Drop`,
`Source`, `Var` and `IdentityVar`, each with validation, and the abstract
`RiverTransport` to implement for a link to a monitor.

## What the package does not do

- The red-black tree has no lookup, deletion or traversal; it only inserts
  and rotates.
- `stashkit.river` provides the state, actions and transport messages for
  telemetry variables, but no store to hold them, no variable types to
  publish, no registry of published names and nothing that serves a monitor
  over a `RiverTransport`. Those have to be built on top.
- There is no command-line program.