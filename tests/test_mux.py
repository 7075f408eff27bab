"""
流复用测试
"""
from unittest.mock import Mock

from conftest import FakeChannel, wait_for
from switch_ssh.mux import StreamMultiplexer
from switch_ssh.utils import ReadError, WriteError


class TestStreamMultiplexer:
    """读写线程"""

    def test_writer_appends_line_terminator(self):
        channel = FakeChannel()
        mux = StreamMultiplexer(channel, channel)
        mux.start()

        mux.write_queue.put("display version")
        mux.write_queue.put("")

        assert wait_for(lambda: len(channel.raw_sent) == 2)
        assert channel.raw_sent == [b"display version\n", b"\n"]
        mux.close()

    def test_reader_pushes_chunks(self):
        channel = FakeChannel()
        mux = StreamMultiplexer(channel, channel)
        mux.start()

        channel.feed("<sw1>")
        channel.feed("display clock\r\n")

        assert mux.read_queue.get(timeout=1) == "<sw1>"
        assert mux.read_queue.get(timeout=1) == "display clock\r\n"
        mux.close()

    def test_multibyte_characters_split_across_reads(self):
        channel = FakeChannel()
        mux = StreamMultiplexer(channel, channel, encoding="utf-8")
        mux.start()

        data = "交换机".encode("utf-8")
        channel.feed(data[:4])
        channel.feed(data[4:])

        chunks = [mux.read_queue.get(timeout=1)]
        while "".join(chunks) != "交换机":
            chunks.append(mux.read_queue.get(timeout=1))
        assert "�" not in "".join(chunks)
        mux.close()

    def test_remote_hang_up_reports_read_error(self):
        channel = FakeChannel()
        on_failure = Mock()
        mux = StreamMultiplexer(channel, channel, on_failure=on_failure)
        mux.start()

        channel.hang_up()

        assert wait_for(lambda: on_failure.called)
        assert isinstance(on_failure.call_args[0][0], ReadError)

    def test_write_failure_reports_write_error(self):
        channel = FakeChannel()
        channel.fail_send = True
        on_failure = Mock()
        mux = StreamMultiplexer(channel, channel, on_failure=on_failure)
        mux.start()

        mux.write_queue.put("display version")

        assert wait_for(lambda: on_failure.called)
        error = on_failure.call_args[0][0]
        assert isinstance(error, WriteError)
        assert error.details["command"] == "display version"

    def test_close_stops_writer(self):
        channel = FakeChannel()
        mux = StreamMultiplexer(channel, channel)
        mux.start()

        mux.close()
        mux.close()

        mux._writer.join(timeout=1)
        assert not mux._writer.is_alive()
        assert mux.closed

    def test_failures_after_close_are_not_reported(self):
        channel = FakeChannel()
        on_failure = Mock()
        mux = StreamMultiplexer(channel, channel, on_failure=on_failure)
        mux.start()

        mux.close()
        channel.close()

        mux._reader.join(timeout=1)
        assert not mux._reader.is_alive()
        on_failure.assert_not_called()

    def test_reader_uses_configured_buffer_size(self):
        channel = FakeChannel()
        mux = StreamMultiplexer(channel, channel)
        mux.start()

        channel.feed("<sw1>")

        assert mux.read_queue.get(timeout=1) == "<sw1>"
        assert channel.recv_sizes[0] == 65536
        mux.close()
