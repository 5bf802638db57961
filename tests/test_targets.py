import unittest

from ssrfprobe.exceptions import ConfigurationError, TargetParseError
from ssrfprobe.targets import TargetSpace, parse_addresses, parse_ports


class TestParseAddresses(unittest.TestCase):
    def test_cidr_drops_network_and_broadcast(self):
        addresses = parse_addresses("192.168.1.0/24")

        self.assertEqual(len(addresses), 254)
        self.assertEqual(addresses[0], "192.168.1.1")
        self.assertEqual(addresses[-1], "192.168.1.254")
        self.assertNotIn("192.168.1.0", addresses)
        self.assertNotIn("192.168.1.255", addresses)

    def test_cidr_masks_host_bits(self):
        self.assertEqual(parse_addresses("10.0.0.77/30"), ["10.0.0.77", "10.0.0.78"])

    def test_small_cidr_blocks_keep_every_address(self):
        self.assertEqual(parse_addresses("10.0.0.4/31"), ["10.0.0.4", "10.0.0.5"])
        self.assertEqual(parse_addresses("10.0.0.9/32"), ["10.0.0.9"])

    def test_short_range(self):
        self.assertEqual(
            parse_addresses("10.0.0.5-8"),
            ["10.0.0.5", "10.0.0.6", "10.0.0.7", "10.0.0.8"],
        )

    def test_full_range_crosses_octets(self):
        self.assertEqual(
            parse_addresses("10.0.0.254-10.0.1.1"),
            ["10.0.0.254", "10.0.0.255", "10.0.1.0", "10.0.1.1"],
        )

    def test_single_address_range(self):
        self.assertEqual(parse_addresses("10.0.0.5-5"), ["10.0.0.5"])

    def test_reversed_range_fails(self):
        with self.assertRaises(TargetParseError):
            parse_addresses("10.0.0.9-3")

    def test_range_octet_out_of_bounds(self):
        with self.assertRaises(TargetParseError):
            parse_addresses("10.0.0.1-256")

    def test_range_requires_ipv4_start(self):
        with self.assertRaises(TargetParseError):
            parse_addresses("not-an-ip")

    def test_literals_pass_through(self):
        self.assertEqual(parse_addresses("10.1.2.3"), ["10.1.2.3"])
        self.assertEqual(parse_addresses("::1"), ["::1"])

    def test_hostname_passes_through_without_resolution(self):
        self.assertEqual(parse_addresses("localhost"), ["localhost"])
        self.assertEqual(parse_addresses("metadata.google.internal"), ["metadata.google.internal"])
        self.assertEqual(parse_addresses("  redis_cache  "), ["redis_cache"])

    def test_invalid_hostname(self):
        with self.assertRaises(TargetParseError) as ctx:
            parse_addresses("bad host!")
        self.assertIn("invalid target address format", str(ctx.exception))

    def test_empty_input(self):
        with self.assertRaises(TargetParseError):
            parse_addresses("   ")

    def test_parse_errors_are_configuration_errors(self):
        with self.assertRaises(ConfigurationError):
            parse_addresses("300.1.1.0/24")

    def test_idempotent(self):
        for spec in ("192.168.7.0/28", "10.0.0.5-8", "internal"):
            self.assertEqual(parse_addresses(spec), parse_addresses(spec))


class TestParsePorts(unittest.TestCase):
    def test_dedup_keeps_first_seen_order(self):
        self.assertEqual(parse_ports("80,80-82,82"), [80, 81, 82])

    def test_overlapping_ranges(self):
        self.assertEqual(parse_ports("8080,1-3,2-4,8080"), [8080, 1, 2, 3, 4])

    def test_whitespace_is_ignored(self):
        self.assertEqual(parse_ports(" 443 , 22 "), [443, 22])

    def test_out_of_range_port(self):
        for spec in ("0", "65536", "1-70000"):
            with self.subTest(spec=spec):
                with self.assertRaises(TargetParseError):
                    parse_ports(spec)

    def test_reversed_range(self):
        with self.assertRaises(TargetParseError):
            parse_ports("90-80")

    def test_garbage(self):
        for spec in ("http", "80,,81", "1-2-3"):
            with self.subTest(spec=spec):
                with self.assertRaises(TargetParseError):
                    parse_ports(spec)

    def test_empty_port_list_is_an_error(self):
        with self.assertRaises(TargetParseError):
            parse_ports(" ")

    def test_idempotent(self):
        self.assertEqual(parse_ports("22,1000-1010,22"), parse_ports("22,1000-1010,22"))


class TestTargetSpace(unittest.TestCase):
    def test_unset_fields_stay_empty(self):
        space = TargetSpace.from_spec()

        self.assertEqual(space.addresses, ())
        self.assertEqual(space.ports, ())

    def test_from_spec(self):
        space = TargetSpace.from_spec("10.0.0.1-2", "6379,80")

        self.assertEqual(space.addresses, ("10.0.0.1", "10.0.0.2"))
        self.assertEqual(space.ports, (6379, 80))


if __name__ == "__main__":
    unittest.main()
