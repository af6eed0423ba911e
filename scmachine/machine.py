#!/usr/bin/env python3

"""
Machine Emulator (CHIP-8 and Super-CHIP)

Like a real computer, this is where most of the processing happens.  The
machine owns memory, the register file, the framebuffer, the keypad state and
both countdown timers, and nothing else touches them directly.

Two clocks are driven from one real-time source:
    * The CPU clock, which runs one instruction per cycle at a configurable
      rate (or as fast as possible)
    * The 60Hz I/O clock, which decrements the timers and flushes the
      framebuffer

Time is accumulated between instructions and whole I/O periods are paid out
as ticks, so a slow host catches up with a short burst of ticks rather than
slowing the timers down.

Interaction with the outside world happens through a few narrow doors, all
safe to use from a thread other than the one running the machine:
    * set_key() overwrites one key's state
    * request_reset() queues a reset for the next cycle
    * a cancellation Event passed to run()
The framebuffer's redraw collaborator is handed an immutable pixel snapshot.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from time import perf_counter, sleep
from .audio.a_null import Audio as NullAudio
from .constants import (
    DEFAULT_CLOCK_SPEED, FONT_BG_LOC, FONT_SM_LOC, IO_FREQ, MEM_SIZE, NUM_KEYS, PROGRAM_START
)
from .debugger import Debugger
from .fonts import BIG_FONT, SMALL_FONT
from .framebuffer import Framebuffer
from .opcodes import Op, decode
from .ram import RAM
from .registers import ADDR_MASK, RegisterFile

IO_INTERVAL = 1.0 / IO_FREQ
I_MASK = 0xFFFF  # I is a 16-bit register, even though only 12 bits can address memory


class MachineError(Exception):
    pass


class ProgramError(MachineError):
    pass


class Machine:
    def __init__(self, redraw=None, resolution_changed=None, audio=None, debugger=None, rng=None,
                 clock_speed=None):
        self.ram = RAM(MEM_SIZE)
        self.ram.write_block(FONT_SM_LOC, SMALL_FONT)
        self.ram.write_block(FONT_BG_LOC, BIG_FONT)
        self.registers = RegisterFile()
        self.framebuffer = Framebuffer(redraw, resolution_changed)
        self.keys = [False] * NUM_KEYS
        self.audio = NullAudio() if audio is None else audio
        self.debugger = Debugger() if debugger is None else debugger
        self.rng = Random() if rng is None else rng
        self.set_clock_speed(DEFAULT_CLOCK_SPEED if clock_speed is None else clock_speed)

        # Timers
        self.dt = 0  # Delay timer
        self.st = 0  # Sound timer
        self.io_time = 0.0  # Real time owed to the I/O clock, always less than one period after a catch-up

        # Execution state
        self.debug_pc = PROGRAM_START  # Address of the instruction being executed
        self.halted = False
        self.reset_requested = False

        # Performance counters, read by the front-end
        self.ops_per_second = 0
        self.ticks_per_second = 0

        self.handlers = {
            Op.UNKNOWN:   self._unknown,
            Op.CLS:       self._cls,
            Op.RET:       self._ret,
            Op.JP:        self._jp,
            Op.CALL:      self._call,
            Op.SE_BYTE:   self._se_byte,
            Op.SNE_BYTE:  self._sne_byte,
            Op.SE_REG:    self._se_reg,
            Op.LD_BYTE:   self._ld_byte,
            Op.ADD_BYTE:  self._add_byte,
            Op.LD_REG:    self._ld_reg,
            Op.OR:        self._or,
            Op.AND:       self._and,
            Op.XOR:       self._xor,
            Op.ADD_REG:   self._add_reg,
            Op.SUB:       self._sub,
            Op.SHR:       self._shr,
            Op.SUBN:      self._subn,
            Op.SHL:       self._shl,
            Op.SNE_REG:   self._sne_reg,
            Op.LD_I:      self._ld_i,
            Op.JP_V0:     self._jp_v0,
            Op.RND:       self._rnd,
            Op.DRW:       self._drw,
            Op.SKP:       self._skp,
            Op.SKNP:      self._sknp,
            Op.LD_VX_DT:  self._ld_vx_dt,
            Op.LD_VX_K:   self._ld_vx_k,
            Op.LD_DT_VX:  self._ld_dt_vx,
            Op.LD_ST_VX:  self._ld_st_vx,
            Op.ADD_I:     self._add_i,
            Op.LD_F:      self._ld_f,
            Op.LD_B:      self._ld_b,
            Op.LD_MEM_VX: self._ld_mem_vx,
            Op.LD_VX_MEM: self._ld_vx_mem,
            Op.SCD:       self._scd,
            Op.SCR:       self._scr,
            Op.SCL:       self._scl,
            Op.EXIT:      self._exit,
            Op.LOW:       self._low,
            Op.HIGH:      self._high,
            Op.LD_HF:     self._ld_hf,
            Op.LD_R_VX:   self._ld_r_vx,
            Op.LD_VX_R:   self._ld_vx_r
        }

    # Host-facing controls

    def load_program(self, data):
        max_size = MEM_SIZE - PROGRAM_START

        if len(data) > max_size:
            raise ProgramError(
                "Program is {} bytes, but only {} bytes are available from 0x{:03x}".format(
                    len(data), max_size, PROGRAM_START
                )
            )

        self.ram.write_block(PROGRAM_START, data)

    def set_key(self, key, down):
        if not 0 <= key < NUM_KEYS:
            raise MachineError("Key 0x{:x} is outside the keypad".format(key))

        self.keys[key] = bool(down)

    def clear_keys(self):
        for key in range(NUM_KEYS):
            self.keys[key] = False

    def reset(self):
        # Memory, including any loaded program, is left as it is
        self.registers.reset()
        self.framebuffer.set_resolution(False)
        self.framebuffer.clear()
        self.clear_keys()
        self.dt = 0
        self.st = 0
        self.io_time = 0.0
        self.debug_pc = self.registers.pc
        self.halted = False

    def request_reset(self):
        # Picked up by run() between instructions
        self.reset_requested = True

    def set_clock_speed(self, clock_speed):
        # 0 or less runs uncapped
        self.clock_speed = clock_speed
        self.core_interval = None if clock_speed <= 0 else 1.0 / clock_speed

    def get_clock_speed(self):
        return self.clock_speed

    # CPU cycle

    def fetch(self):
        pc = self.registers.pc
        return (self.ram.read(pc) << 8) | self.ram.read((pc + 1) & ADDR_MASK)  # Big-endian

    def step(self):
        # Program counter updates after fetch, but before execute, so jumps and skips can override it
        self.debug_pc = self.registers.pc
        instruction = decode(self.fetch())
        self.registers.advance()
        self.execute(instruction)

    def execute(self, instruction):
        if self.debugger.live:
            self.debugger.output(self, instruction)

        self.handlers[instruction.op](instruction)

    # I/O cycle

    def io_tick(self):
        if self.dt > 0:
            self.dt -= 1

        if self.st > 0:
            self.st -= 1

            if self.st == 0:
                self.audio.play_tone()

        self.framebuffer.flush()

    def advance_clock(self, elapsed):
        # Pay out one I/O tick per whole period of accumulated time
        self.io_time += elapsed
        ticks = 0

        while self.io_time >= IO_INTERVAL:
            self.io_tick()
            self.io_time -= IO_INTERVAL
            ticks += 1

        if self.io_time < 0.0:
            self.io_time = 0.0

        return ticks

    def run(self, cancel_event=None, clock=perf_counter):
        last_time = clock()
        next_perf_report_time = last_time + 1.0
        perf_counter_ops = 0
        perf_counter_ticks = 0

        while not self.halted and (cancel_event is None or not cancel_event.is_set()):
            if self.reset_requested:
                # Cleared first, so a request arriving mid-reset is kept for the next cycle
                self.reset_requested = False
                self.reset()

            this_time = clock()
            self.step()
            perf_counter_ops += 1

            now = clock()
            perf_counter_ticks += self.advance_clock(now - last_time)
            last_time = now

            if now >= next_perf_report_time:
                self.ops_per_second = perf_counter_ops
                self.ticks_per_second = perf_counter_ticks
                perf_counter_ops = 0
                perf_counter_ticks = 0
                next_perf_report_time = now + 1.0

            core_interval = self.core_interval

            if core_interval is not None:
                # Wait for the next CPU slot, taking into account time spent on this instruction
                remaining = this_time + core_interval - clock()

                if remaining > 0:
                    sleep(remaining)

        # Deliver whatever was drawn since the last tick
        self.framebuffer.flush()

    # Instruction helpers

    def _skip(self):
        self.registers.advance()

    def _mem_write(self, offset, byte):
        self.ram.write((self.registers.i + offset) & ADDR_MASK, byte)

    def _mem_read(self, offset):
        return self.ram.read((self.registers.i + offset) & ADDR_MASK)

    # Instructions for CHIP-8

    def _unknown(self, ins):
        # Degrade rather than crash, so programs using unsupported extensions can carry on
        self.debugger.report_unsupported(self, ins)

    def _cls(self, ins):  # CLS
        self.framebuffer.clear()

    def _ret(self, ins):  # RET
        self.registers.ret()

    def _jp(self, ins):  # JP addr
        self.registers.jump(ins.nnn)

    def _call(self, ins):  # CALL addr
        self.registers.call(ins.nnn)

    def _se_byte(self, ins):  # SE Vx, byte
        if self.registers.v[ins.x] == ins.nn:
            self._skip()

    def _sne_byte(self, ins):  # SNE Vx, byte
        if self.registers.v[ins.x] != ins.nn:
            self._skip()

    def _se_reg(self, ins):  # SE Vx, Vy
        v = self.registers.v

        if v[ins.x] == v[ins.y]:
            self._skip()

    def _ld_byte(self, ins):  # LD Vx, byte
        self.registers.v[ins.x] = ins.nn

    def _add_byte(self, ins):  # ADD Vx, byte
        v = self.registers.v
        v[ins.x] = (v[ins.x] + ins.nn) & 0xFF  # Vf is untouched

    def _ld_reg(self, ins):  # LD Vx, Vy
        v = self.registers.v
        v[ins.x] = v[ins.y]

    def _or(self, ins):  # OR Vx, Vy
        v = self.registers.v
        v[ins.x] |= v[ins.y]

    def _and(self, ins):  # AND Vx, Vy
        v = self.registers.v
        v[ins.x] &= v[ins.y]

    def _xor(self, ins):  # XOR Vx, Vy
        v = self.registers.v
        v[ins.x] ^= v[ins.y]

    def _add_reg(self, ins):  # ADD Vx, Vy
        v = self.registers.v
        val = v[ins.x] + v[ins.y]
        v[ins.x] = val & 0xFF
        v[0xF] = int(val > 0xFF)  # Vf is set when carrying, after Vx in case Vf was an operand

    def _post_sub(self, ins, val):  # Post-SUB/SUBN
        v = self.registers.v
        v[ins.x] = val & 0xFF
        v[0xF] = int(val >= 0)  # Vf is set when NOT borrowing

    def _sub(self, ins):  # SUB Vx, Vy
        v = self.registers.v
        self._post_sub(ins, v[ins.x] - v[ins.y])

    def _subn(self, ins):  # SUBN Vx, Vy
        v = self.registers.v
        self._post_sub(ins, v[ins.y] - v[ins.x])

    def _shr(self, ins):  # SHR Vx, Vy
        # Original CHIP-8 behaviour: Vy is shifted and the result lands in Vx
        v = self.registers.v
        val = v[ins.y]
        v[0xF] = val & 1
        v[ins.x] = val >> 1

    def _shl(self, ins):  # SHL Vx, Vy
        v = self.registers.v
        val = v[ins.y]
        v[0xF] = val >> 7
        v[ins.x] = (val << 1) & 0xFF

    def _sne_reg(self, ins):  # SNE Vx, Vy
        v = self.registers.v

        if v[ins.x] != v[ins.y]:
            self._skip()

    def _ld_i(self, ins):  # LD I, addr
        self.registers.i = ins.nnn

    def _jp_v0(self, ins):  # JP V0, addr
        self.registers.jump(self.registers.v[0] + ins.nnn)

    def _rnd(self, ins):  # RND Vx, byte
        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.registers.v[ins.x] = self.rng.randint(0, 0xFF) & ins.nn

    def _drw(self, ins):  # DRW Vx, Vy, nibble
        # Main sprite drawing routine.  A height of 0 in high resolution draws a 16x16 sprite.
        framebuffer = self.framebuffer
        v = self.registers.v
        height = ins.n

        if height == 0 and framebuffer.is_high_res():
            height = 16
            big_sprite = True
        else:
            big_sprite = False

        width = 16 if big_sprite else 8
        msb = 0x8000 if big_sprite else 0x80
        vx_pos = v[ins.x]  # Read before Vf is cleared, in case either is Vf
        vy_pos = v[ins.y]
        v[0xF] = 0
        collided = False

        for y in range(height):
            if big_sprite:
                spr_data = (self._mem_read(y * 2) << 8) | self._mem_read(y * 2 + 1)
            else:
                spr_data = self._mem_read(y)

            for x in range(width):
                # Don't stop drawing after a collision, the flag just stays set
                if spr_data & (msb >> x) and not framebuffer.toggle(vx_pos + x, vy_pos + y):
                    collided = True

        v[0xF] = int(collided)

    def _skp(self, ins):  # SKP Vx
        if self.keys[self.registers.v[ins.x] & 0xF]:
            self._skip()

    def _sknp(self, ins):  # SKNP Vx
        if not self.keys[self.registers.v[ins.x] & 0xF]:
            self._skip()

    def _ld_vx_dt(self, ins):  # LD Vx, DT
        self.registers.v[ins.x] = self.dt

    def _ld_vx_k(self, ins):  # LD Vx, K
        # Timers and the display must keep going while waiting, so rather than blocking, re-run this instruction on
        # the next cycle until a key is down.
        for key in range(NUM_KEYS):
            if self.keys[key]:
                self.registers.v[ins.x] = key
                return

        self.registers.rewind()

    def _ld_dt_vx(self, ins):  # LD DT, Vx
        self.dt = self.registers.v[ins.x]

    def _ld_st_vx(self, ins):  # LD ST, Vx
        self.st = self.registers.v[ins.x]

    def _add_i(self, ins):  # ADD I, Vx
        registers = self.registers
        val = registers.i + registers.v[ins.x]
        registers.i = val & I_MASK
        registers.v[0xF] = int(val > ADDR_MASK)

    def _ld_f(self, ins):  # LD F, Vx
        self.registers.i = FONT_SM_LOC + 5 * self.registers.v[ins.x]

    def _ld_b(self, ins):  # LD B, Vx
        val = self.registers.v[ins.x]
        self._mem_write(0, val // 100)        # Most-significant digit
        self._mem_write(1, (val // 10) % 10)  # Middle digit
        self._mem_write(2, val % 10)          # Least-significant digit

    def _ld_mem_vx(self, ins):  # LD [I], Vx
        v = self.registers.v

        for reg in range(ins.x + 1):
            self._mem_write(reg, v[reg])

        self.registers.i = (self.registers.i + ins.x + 1) & I_MASK

    def _ld_vx_mem(self, ins):  # LD Vx, [I]
        v = self.registers.v

        for reg in range(ins.x + 1):
            v[reg] = self._mem_read(reg)

        self.registers.i = (self.registers.i + ins.x + 1) & I_MASK

    # Instructions for Super-CHIP

    def _scd(self, ins):  # SCD n
        self.framebuffer.scroll_down(ins.n)

    def _scr(self, ins):  # SCR
        self.framebuffer.scroll_right(4)

    def _scl(self, ins):  # SCL
        self.framebuffer.scroll_left(4)

    def _exit(self, ins):  # EXIT
        self.halted = True

    def _low(self, ins):  # LOW
        self.framebuffer.set_resolution(False)

    def _high(self, ins):  # HIGH
        self.framebuffer.set_resolution(True)

    def _ld_hf(self, ins):  # LD HF, Vx
        # The big glyphs live after the small ones, so they need the 0x50 offset (a bare Vx * 10 would land in the
        # small font)
        self.registers.i = FONT_BG_LOC + 10 * self.registers.v[ins.x]

    def _ld_r_vx(self, ins):  # LD R, Vx
        # Ensure with +1s that the final register is copied
        self.registers.rpl[:ins.x + 1] = self.registers.v[:ins.x + 1]

    def _ld_vx_r(self, ins):  # LD Vx, R
        self.registers.v[:ins.x + 1] = self.registers.rpl[:ins.x + 1]
