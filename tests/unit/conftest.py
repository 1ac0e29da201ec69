import pytest

from air_opgen.ast import ArgType, Role
from air_opgen.generator import generate_text
from air_opgen.operands import Special

SRC = """
# Opcodes de prueba
Nop

Add32 U:G, UD:G
    Tmp, Tmp
    Imm, Tmp
    Addr, Tmp
    Tmp, Addr

Add32 U:G, U:G, D:G
    Tmp, Tmp, Tmp
    Imm, Tmp, Tmp as add32Imm

AddDouble U:F, UD:F
    Tmp, Tmp
    Addr, Tmp

Move U:G, D:G
    Tmp, Tmp
    Imm, Tmp as move32
    Imm64, Tmp
    Addr, Tmp
    Tmp, Addr

Branch32 U:G, U:G, U:G /branch
    RelCond, Tmp, Tmp
    RelCond, Tmp, Imm

Jump /branch

Ret U:G /terminal
    Tmp

Oops /terminal

Lea UA:G, D:G
    Addr, Tmp

Shuffle U:G, D:G /effects
    Tmp*, Tmp

special Patch
"""

class FakeSpecial(Special):
    """Special de prueba: registra las consultas y responde lo configurado."""

    def __init__(self, *, valid=True, admits=True, effects=False):
        self.valid = valid
        self.admits = admits
        self.effects = effects
        self.asked = []

    def for_each_arg(self, inst, functor):
        for arg in inst.args[1:]:
            functor(arg, Role.USE_DEF, ArgType.FP)

    def is_valid(self, inst):
        return self.valid

    def admits_stack(self, inst, arg_index):
        self.asked.append(arg_index)
        return self.admits

    def has_non_arg_non_control_effects(self):
        return self.effects

    def generate(self, inst, jit, context):
        return ("special", context)

class RecordingJit:
    """Encoder falso: cada método registra (nombre, *args) y devuelve un 'jump'."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def method(*args):
            self.calls.append((name,) + args)
            return f"jump:{name}"
        return method

@pytest.fixture
def artifacts():
    return generate_text(SRC, filename="test.opcodes")

@pytest.fixture
def table(artifacts):
    return artifacts.table

@pytest.fixture
def make_special():
    return FakeSpecial

@pytest.fixture
def jit():
    return RecordingJit()
