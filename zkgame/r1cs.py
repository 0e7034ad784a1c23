"""
R1CS (Rank-1 Constraint System)
===============================

회로의 제약 조건 기술자. 각 제약은 세 선형 결합 (A, B, C) 로 이루어지며
위트니스 w 에 대해 다음을 만족해야 한다.

  ⟨A, w⟩ · ⟨B, w⟩ = ⟨C, w⟩   (mod r)

**와이어 순서** (circom 관례):
  w[0] = 1 (상수 와이어)
  w[1 .. nPubOut]                 공개 출력
  w[.. + nPubIn]                  공개 입력
  w[.. + nPrvIn]                  비공개 입력
  나머지                           내부 신호

  공개 입력 벡터 = w[1 .. nPubOut + nPubIn]

**바이너리 포맷** (.r1cs, circom 이 생성):
  "r1cs" | version u32 | nSections u32 | { type u32 | size u64 | 본문 }*

  섹션 1 (헤더):
    n8 u32 | prime (n8 바이트 LE) | nWires u32 | nPubOut u32 | nPubIn u32 |
    nPrvIn u32 | nLabels u64 | nConstraints u32
  섹션 2 (제약):
    제약마다 A, B, C 순서로 { nnz u32 | (wireId u32, coeff n8 바이트 LE)* }
  섹션 3 (wire → label):
    nWires 개의 u64

  정수는 모두 little-endian 이다. 섹션 순서는 고정되어 있지 않으므로
  먼저 섹션 위치를 모은 뒤 헤더부터 해석한다.
"""

import struct

from zkgame.serializers import read_source


MAGIC = b"r1cs"
VERSION = 1

SECTION_HEADER = 1
SECTION_CONSTRAINTS = 2
SECTION_WIRE2LABEL = 3


class R1CSFormatError(ValueError):
    """.r1cs 바이너리를 해석할 수 없을 때."""


class R1CS:
    """R1CS 데이터 모델.

    속성:
        prime: 스칼라 필드 위수 r
        n_wires: 전체 와이어 수 (상수 와이어 포함)
        n_pub_out, n_pub_in, n_prv_in: 신호 종류별 개수
        constraints: [(A, B, C), ...], 각 항은 {wire: coeff} dict
        n_labels: 라벨 수 (없으면 n_wires)
        wire_to_label: 와이어별 라벨 id (없으면 항등)
    """

    def __init__(self, prime, n_wires, n_pub_out, n_pub_in, n_prv_in,
                 constraints, n_labels=None, wire_to_label=None):
        if prime < 2:
            raise ValueError(f"필드 위수가 올바르지 않습니다: {prime}")
        self.prime = prime
        self.n_wires = n_wires
        self.n_pub_out = n_pub_out
        self.n_pub_in = n_pub_in
        self.n_prv_in = n_prv_in
        self.constraints = [
            tuple(_reduce_lc(lc, prime) for lc in constraint)
            for constraint in constraints
        ]
        self.n_labels = n_wires if n_labels is None else n_labels
        if wire_to_label is None:
            wire_to_label = list(range(n_wires))
        self.wire_to_label = list(wire_to_label)

    def __repr__(self):
        return (f"R1CS(wires={self.n_wires}, public={self.n_public}, "
                f"constraints={self.n_constraints})")

    @property
    def n_public(self):
        """공개 입력 수 (공개 출력 + 공개 입력)."""
        return self.n_pub_out + self.n_pub_in

    @property
    def n_constraints(self):
        return len(self.constraints)

    def public_inputs(self, witness):
        """위트니스에서 공개 입력 벡터를 뽑는다."""
        return [int(v) for v in witness[1:1 + self.n_public]]

    @staticmethod
    def evaluate(lc, witness, prime):
        """⟨lc, w⟩ mod r"""
        return sum(coeff * witness[wire] for wire, coeff in lc.items()) % prime

    def first_unsatisfied(self, witness):
        """만족되지 않는 첫 제약의 인덱스. 모두 만족하면 None.

        Raises:
            ValueError: 위트니스 길이가 와이어 수와 다르거나 w[0] != 1
        """
        if len(witness) != self.n_wires:
            raise ValueError(
                f"위트니스 길이 {len(witness)} 가 와이어 수 {self.n_wires} 와 다릅니다"
            )
        if witness[0] % self.prime != 1:
            raise ValueError("w[0] 은 1 이어야 합니다")
        p = self.prime
        for idx, (a, b, c) in enumerate(self.constraints):
            lhs = self.evaluate(a, witness, p) * self.evaluate(b, witness, p) % p
            if lhs != self.evaluate(c, witness, p):
                return idx
        return None

    def is_satisfied(self, witness):
        return self.first_unsatisfied(witness) is None


def _reduce_lc(lc, prime):
    """계수를 [0, r) 로 정규화하고 0 인 항은 버린다."""
    out = {}
    for wire, coeff in dict(lc).items():
        coeff = int(coeff) % prime
        if coeff:
            out[int(wire)] = coeff
    return out


# ─────────────────────────────────────────────────────────────────────
# 바이너리 읽기
# ─────────────────────────────────────────────────────────────────────

class _Reader:
    def __init__(self, data, pos=0, end=None):
        self.data = data
        self.pos = pos
        self.end = len(data) if end is None else end

    def take(self, n):
        if self.pos + n > self.end:
            raise R1CSFormatError("예상보다 일찍 데이터가 끝났습니다")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def u32(self):
        return struct.unpack("<I", self.take(4))[0]

    def u64(self):
        return struct.unpack("<Q", self.take(8))[0]

    def bigint(self, n8):
        return int.from_bytes(self.take(n8), "little")


def read_r1cs(source):
    """circom .r1cs 바이너리 → R1CS.

    Args:
        source: bytes 또는 파일 경로

    Raises:
        R1CSFormatError: 매직/버전/섹션 구조가 올바르지 않을 때
    """
    data = read_source(source)
    reader = _Reader(data)
    if reader.take(4) != MAGIC:
        raise R1CSFormatError("r1cs 매직 바이트가 아닙니다")
    version = reader.u32()
    if version != VERSION:
        raise R1CSFormatError(f"지원하지 않는 r1cs 버전입니다: {version}")
    n_sections = reader.u32()

    sections = {}
    for _ in range(n_sections):
        kind = reader.u32()
        size = reader.u64()
        sections.setdefault(kind, (reader.pos, reader.pos + size))
        reader.take(size)

    if SECTION_HEADER not in sections:
        raise R1CSFormatError("헤더 섹션이 없습니다")
    if SECTION_CONSTRAINTS not in sections:
        raise R1CSFormatError("제약 섹션이 없습니다")

    # ── 헤더 ──
    hdr = _Reader(data, *sections[SECTION_HEADER])
    n8 = hdr.u32()
    prime = hdr.bigint(n8)
    if prime < 2:
        raise R1CSFormatError(f"헤더의 필드 위수가 올바르지 않습니다: {prime}")
    n_wires = hdr.u32()
    n_pub_out = hdr.u32()
    n_pub_in = hdr.u32()
    n_prv_in = hdr.u32()
    n_labels = hdr.u64()
    n_constraints = hdr.u32()

    # ── 제약 ──
    body = _Reader(data, *sections[SECTION_CONSTRAINTS])

    def read_lc():
        lc = {}
        for _ in range(body.u32()):
            wire = body.u32()
            lc[wire] = body.bigint(n8)
        return lc

    constraints = [
        (read_lc(), read_lc(), read_lc()) for _ in range(n_constraints)
    ]

    # ── wire → label ──
    wire_to_label = None
    if SECTION_WIRE2LABEL in sections:
        labels = _Reader(data, *sections[SECTION_WIRE2LABEL])
        wire_to_label = [labels.u64() for _ in range(n_wires)]

    return R1CS(prime, n_wires, n_pub_out, n_pub_in, n_prv_in, constraints,
                n_labels=n_labels, wire_to_label=wire_to_label)


# ─────────────────────────────────────────────────────────────────────
# 바이너리 쓰기
# ─────────────────────────────────────────────────────────────────────

def _field_bytes(prime):
    # circom 은 필드 원소를 8바이트 단위로 채운다 (BN254, BLS12-381 모두 32)
    return ((prime.bit_length() + 63) // 64) * 8


def write_r1cs(r1cs):
    """R1CS → circom .r1cs 바이너리 (bytes)."""
    n8 = _field_bytes(r1cs.prime)

    header = b"".join([
        struct.pack("<I", n8),
        r1cs.prime.to_bytes(n8, "little"),
        struct.pack("<IIII", r1cs.n_wires, r1cs.n_pub_out,
                    r1cs.n_pub_in, r1cs.n_prv_in),
        struct.pack("<Q", r1cs.n_labels),
        struct.pack("<I", r1cs.n_constraints),
    ])

    parts = []
    for constraint in r1cs.constraints:
        for lc in constraint:
            parts.append(struct.pack("<I", len(lc)))
            for wire in sorted(lc):
                parts.append(struct.pack("<I", wire))
                parts.append(lc[wire].to_bytes(n8, "little"))
    body = b"".join(parts)

    labels = b"".join(struct.pack("<Q", label) for label in r1cs.wire_to_label)

    sections = [
        (SECTION_HEADER, header),
        (SECTION_CONSTRAINTS, body),
        (SECTION_WIRE2LABEL, labels),
    ]
    out = [MAGIC, struct.pack("<II", VERSION, len(sections))]
    for kind, content in sections:
        out.append(struct.pack("<IQ", kind, len(content)))
        out.append(content)
    return b"".join(out)
