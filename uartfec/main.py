"""
Repetition Code Link - Main Entry Point
Encodes, decodes, or round-trips messages through a noisy serial link
"""

import argparse
import logging
import os

from uartfec.channel import BitFlipChannel, SerialLink
from uartfec.config_utils import (
    ConfigurationError,
    build_devices,
    load_config,
    setup_logging,
)

logger = logging.getLogger(__name__)


def run_encode(encoder, text: str):
    encoder.open()
    try:
        encoder.write(text.encode())
        result = encoder.read()
    finally:
        encoder.close()

    print(f"Encoded ({result.length} bytes): {result.data.hex()}")


def run_decode(decoder, hex_data: str):
    decoder.open()
    try:
        decoder.write(bytes.fromhex(hex_data))
        result = decoder.read()
    finally:
        decoder.close()

    print(f"Decoded ({result.length} bytes): {result.data.decode(errors='replace')}")
    print(f"Corrections: {decoder.last_result.corrections}")


def run_loopback(encoder, decoder, text: str, ber: float, seed):
    link = SerialLink(encoder, decoder, BitFlipChannel(ber=ber, seed=seed))
    report = link.send(text.encode())

    print(f"Sent:      {report.sent.decode(errors='replace')}")
    print(f"Received:  {report.received.decode(errors='replace')}")
    print(f"Line bit errors:     {report.line_bit_errors}")
    print(f"Corrections:         {report.corrections}")
    print(f"Residual bit errors: {report.residual_bit_errors}")
    print("Status: " + ("PASS" if report.success else "FAIL"))
    return 0 if report.success else 1


def export_metrics(directory: str, *devices):
    """Write one <device name>.json metrics report per device into directory."""
    os.makedirs(directory, exist_ok=True)
    for device in devices:
        path = os.path.join(directory, f"{device.DEVICE_NAME}.json")
        device.metrics.export_json(path)
        logger.info(f"Metrics for {device.DEVICE_NAME} written to {path}")


def main(argv=None):
    parser = argparse.ArgumentParser(description='(3,1) repetition code for serial links')
    parser.add_argument('--config', help='YAML or JSON configuration file')
    parser.add_argument('--framing', choices=['sentinel', 'length'],
                        help='Payload framing (default: from config, sentinel)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')
    parser.add_argument('--metrics', metavar='DIR',
                        help='Write per-device metrics reports (JSON) into DIR')

    subparsers = parser.add_subparsers(dest='command', required=True)

    encode_parser = subparsers.add_parser('encode', help='Triplicate a message')
    encode_parser.add_argument('text')

    decode_parser = subparsers.add_parser('decode', help='Majority-decode hex bytes')
    decode_parser.add_argument('hex_data')

    loopback_parser = subparsers.add_parser('loopback', help='Send a message through a noisy link')
    loopback_parser.add_argument('text')
    loopback_parser.add_argument('--ber', type=float,
                                 help='Bit error rate of the channel (default: from config)')
    loopback_parser.add_argument('--seed', type=int,
                                 help='Random seed for the channel')

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        parser.error(str(e))

    if args.framing:
        config['framing'] = args.framing

    setup_logging(config, verbose=args.verbose)
    encoder, decoder = build_devices(config)

    code = 0
    try:
        if args.command == 'encode':
            run_encode(encoder, args.text)
        elif args.command == 'decode':
            run_decode(decoder, args.hex_data)
        elif args.command == 'loopback':
            ber = args.ber if args.ber is not None else config['channel']['ber']
            seed = args.seed if args.seed is not None else config['channel']['seed']
            code = run_loopback(encoder, decoder, args.text, ber, seed)
    except ValueError as e:
        logger.error(f"Failed to run {args.command}: {e}")
        code = 1

    if args.metrics:
        export_metrics(args.metrics, encoder, decoder)

    return code


if __name__ == '__main__':
    exit(main())
