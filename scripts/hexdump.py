import sys
from pathlib import Path

ROW = 8

def hexdump(data: bytes) -> str:
    rows = []
    for start in range(0, len(data), ROW):
        chunk = data[start:start + ROW]
        hexes = " ".join(f"{b:02x}" for b in chunk).ljust(ROW * 3 - 1)
        text = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        rows.append(f"{start:08x}  {hexes}\t{text}")
    return "\n".join(rows)

def main():
    if len(sys.argv) not in (2, 3):
        print("Usage: hexdump.py <file> [count]")
        raise SystemExit(2)

    data = Path(sys.argv[1]).read_bytes()
    if len(sys.argv) == 3:
        data = data[:int(sys.argv[2])]
    print(hexdump(data))

if __name__ == "__main__":
    main()
