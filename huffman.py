import heapq
import itertools
from typing import Dict, List, Optional, Sequence

from alphabet import ALPHABET_SIZE


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, frequency, left=None, right=None):
        self.symbol = symbol    # symbol index for a leaf, None for an internal node
        self.frequency = frequency
        self.left = left
        self.right = right

    def is_leaf(self) -> bool:
        return self.symbol is not None


def build_huffman_tree(frequency_table: Dict[int, int]) -> HuffmanNode: # frequency_table: dict of symbol -> frequency
    """
    Greedy minimal-pair merge over the symbols with positive frequency.

    Ties between equal weights are broken first in, first out: every tree pushed
    onto the queue gets the next sequence number (leaves in ascending symbol order,
    then merged nodes in creation order) and the queue orders by (weight, sequence).
    """
    sequence = itertools.count()
    priority_queue = [
        (frequency, next(sequence), HuffmanNode(symbol, frequency))
        for symbol, frequency in sorted(frequency_table.items())
        if frequency > 0
    ]
    if not priority_queue:
        raise ValueError("cannot build a Huffman tree without a positive frequency")
    heapq.heapify(priority_queue)

    # Build the tree
    while len(priority_queue) > 1:
        _, _, left = heapq.heappop(priority_queue) # first removed goes left
        _, _, right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left.frequency + right.frequency, left, right)
        heapq.heappush(priority_queue, (merged_node.frequency, next(sequence), merged_node))

    return priority_queue[0][2] # root of the tree


def generate_huffman_codes(root: HuffmanNode) -> Dict[int, str]: # root: root of the Huffman tree
    codes = {}
    def generate_codes_helper(node, current_code): # recursive helper function to traverse the tree and generate codes
        if node is None:
            return

        # Leaf node -> assign code
        if node.is_leaf():
            codes[node.symbol] = current_code # a lone leaf keeps the empty code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes # return the mapping of symbols to their corresponding Huffman codes


class CodeTable:
    """Codewords of one context, indexed by symbol, plus the inverse map for decoding."""

    __slots__ = ("codewords", "decode_table")

    def __init__(self, codewords: Sequence[Optional[str]]):
        if len(codewords) != ALPHABET_SIZE:
            raise ValueError(f"expected {ALPHABET_SIZE} codewords, got {len(codewords)}")
        self.codewords = tuple(codewords)
        self.decode_table = {code: symbol for symbol, code in enumerate(self.codewords) if code is not None}

    def codeword(self, symbol: int) -> str:
        code = self.codewords[symbol]
        if code is None:
            raise KeyError(f"symbol {symbol} has no codeword in this table")
        return code

    def symbol_for(self, candidate: str) -> Optional[int]:
        return self.decode_table.get(candidate)

    def is_complete(self) -> bool:
        return all(code is not None for code in self.codewords)

    def is_prefix_free(self) -> bool:
        # after sorting, a codeword that prefixes another sorts directly before one of its extensions
        codes = sorted(code for code in self.codewords if code is not None)
        return not any(b.startswith(a) for a, b in zip(codes, codes[1:]))

    def __eq__(self, other):
        if not isinstance(other, CodeTable):
            return NotImplemented
        return self.codewords == other.codewords

    def __hash__(self):
        return hash(self.codewords)

    def __repr__(self):
        return f"CodeTable({list(self.codewords)!r})"


def build_code_table(frequency_vector: Sequence[int]) -> CodeTable: # frequency_vector: ALPHABET_SIZE counts indexed by symbol
    root = build_huffman_tree(dict(enumerate(frequency_vector)))
    codes = generate_huffman_codes(root)
    return CodeTable([codes.get(symbol) for symbol in range(ALPHABET_SIZE)])


def huffman_encode(symbols: Sequence[int], code_map: Dict[int, str]) -> str: # symbols: sequence to encode, code_map: dict of symbol -> Huffman code
    return ''.join(code_map[symbol] for symbol in symbols)


def huffman_decode(bitstring: str, root: HuffmanNode) -> List[int]: # bitstring: the encoded string of '0's and '1's, root: root of the Huffman tree
    decoded_symbols = []
    current_node = root
    for bit in bitstring:
        current_node = current_node.left if bit == '0' else current_node.right
        if current_node.is_leaf(): # reached a leaf
            decoded_symbols.append(current_node.symbol)
            current_node = root # reset to the root for the next symbol

    return decoded_symbols
