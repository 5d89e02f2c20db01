"""PCM word and frame decoding."""

from pcm_meter.decoder.pcm_decoder import SampleDecoder, decode_frames, decode_word

__all__ = ["SampleDecoder", "decode_frames", "decode_word"]
