"""Fixed kernel configuration values."""

CODE_SELECTOR = 0x08
DATA_SELECTOR = 0x10

TOTAL_INTERRUPTS = 512

HEAP_SIZE_BYTES = 104857600
HEAP_BLOCK_SIZE = 4096
HEAP_ADDRESS = 0x01000000
HEAP_TABLE_ADDRESS = 0x00007E00

SECTOR_SIZE = 512

MAX_FILESYSTEMS = 12
MAX_FILE_DESCRIPTORS = 512
MAX_PATH = 108

TOTAL_GDT_SEGMENTS = 6

PROGRAM_VIRTUAL_ADDRESS = 0x400000
PROGRAM_VIRTUAL_STACK_ADDRESS_START = 0x3FF000
USER_PROGRAM_STACK_SIZE = 1024 * 16
PROGRAM_VIRTUAL_STACK_ADDRESS_END = (
    PROGRAM_VIRTUAL_STACK_ADDRESS_START - USER_PROGRAM_STACK_SIZE
)
USER_DATA_SEGMENT = 0x23
USER_CODE_SEGMENT = 0x1B

MAX_PROGRAM_ALLOCATIONS = 1024
MAX_PROCESSES = 12

MAX_SYSCALLS = 1024

KEYBOARD_BUFFER_SIZE = 1024