"""
Run the whole PSI protocol locally: both roles in one process.

    bfv-psi receiver.txt sender.txt --degree 8192 --mode set --output out.txt
"""

import argparse
import logging
import sys

from .custom_fhe import SchemeParameters
from .dataset import load_dataset
from .exceptions import PSIError
from .monitor import StageTimer
from .receiver import Receiver
from .report import print_intersection, write_intersection
from .sender import MatchMode, Sender

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="bfv-psi",
        description="Private Set Intersection over batched BFV homomorphic encryption")
    parser.add_argument('receiver_file', help="Receiver dataset, one bitstring per line")
    parser.add_argument('sender_file', help="Sender dataset, one bitstring per line")
    parser.add_argument('--degree', type=int, default=4096,
                        help="Polynomial modulus degree N (default 4096)")
    parser.add_argument('--mode', choices=[m.value for m in MatchMode], default=MatchMode.SET.value,
                        help="'set' for set membership, 'positional' for slot-to-slot equality")
    parser.add_argument('--no-mask', action='store_true',
                        help="Do not randomize non-matching slots")
    parser.add_argument('--output', help="Write the intersecting bitstrings to this file")
    parser.add_argument('--verbose', '-v', action='store_true', help="Debug logging")
    return parser


def run(args):
    params = SchemeParameters(args.degree)
    receiver_dataset = load_dataset(args.receiver_file)
    sender_dataset = load_dataset(args.sender_file)
    timer = StageTimer()

    receiver = timer.run('Key setup', Receiver, params, receiver_dataset)
    sender = Sender(params, sender_dataset, mode=args.mode, mask=not args.no_mask)

    query = timer.run('Encrypt', receiver.encrypt_dataset)
    fresh_budget = receiver.noise_budget(query)

    bundle = receiver.public_bundle()
    result_cipher = timer.run('Match', sender.compute, query, bundle)
    result = timer.run('Decrypt', receiver.decrypt_and_intersect, result_cipher)

    print()
    print_intersection(result)
    print()
    print(f"Noise budget after encryption: {fresh_budget} bits")
    print(f"Noise budget of result:        {result.noise_budget} bits")
    print(timer.format_table())

    if args.output:
        write_intersection(args.output, result)
    return result


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        result = run(args)
    except (PSIError, OSError) as e:
        logger.error(str(e))
        return 1
    return 2 if result.noise_exhausted else 0


if __name__ == "__main__":
    sys.exit(main())
