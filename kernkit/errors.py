"""Error numbers, system call numbers and the result convention of system calls."""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "Errno",
    "SyscallError",
    "Syscall",
    "check_result",
    "STDIN_FILENO",
    "STDOUT_FILENO",
    "STDERR_FILENO",
    "F_OK",
    "X_OK",
    "W_OK",
    "R_OK",
    "SEEK_SET",
    "SEEK_CUR",
    "SEEK_END",
]

STDIN_FILENO = 0
STDOUT_FILENO = 1
STDERR_FILENO = 2

F_OK = 0
X_OK = 1
W_OK = 2
R_OK = 4

SEEK_SET = 0
SEEK_CUR = 1
SEEK_END = 2


class Errno(IntEnum):
    """Error numbers that system calls report."""

    EPERM = 1
    ENOENT = 2
    ESRCH = 3
    EINTR = 4
    EIO = 5
    ENXIO = 6
    E2BIG = 7
    ENOEXEC = 8
    EBADF = 9
    ECHILD = 10
    EAGAIN = 11
    ENOMEM = 12
    EACCES = 13
    EFAULT = 14
    ENOTBLK = 15
    EBUSY = 16
    EEXIST = 17
    EXDEV = 18
    ENODEV = 19
    ENOTDIR = 20
    EISDIR = 21
    EINVAL = 22
    ENFILE = 23
    EMFILE = 24
    ENOTTY = 25
    ETXTBSY = 26
    EFBIG = 27
    ENOSPC = 28
    ESPIPE = 29
    EROFS = 30
    EMLINK = 31
    EPIPE = 32
    EDOM = 33
    ERANGE = 34
    EDEADLK = 35
    ENAMETOOLONG = 36
    ENOLCK = 37
    ENOSYS = 38
    ENOTEMPTY = 39
    ERROR = 99


class SyscallError(OSError):
    """A system call reported failure with an error number."""

    def __init__(self, errno: int) -> None:
        try:
            code: int = Errno(errno)
            text = code.name
        except ValueError:
            code = errno
            text = f"unknown error {errno}"
        super().__init__(int(code), text)
        self.errno = code


class Syscall(IntEnum):
    """System call numbers placed in the accumulator before trapping."""

    SETUP = 0
    EXIT = 1
    FORK = 2
    READ = 3
    WRITE = 4
    OPEN = 5
    CLOSE = 6
    WAITPID = 7
    CREAT = 8
    LINK = 9
    UNLINK = 10
    EXECVE = 11
    CHDIR = 12
    TIME = 13
    MKNOD = 14
    CHMOD = 15
    CHOWN = 16
    BREAK = 17
    STAT = 18
    LSEEK = 19
    GETPID = 20
    MOUNT = 21
    UMOUNT = 22
    SETUID = 23
    GETUID = 24
    STIME = 25
    PTRACE = 26
    ALARM = 27
    FSTAT = 28
    PAUSE = 29
    UTIME = 30
    STTY = 31
    GTTY = 32
    ACCESS = 33
    NICE = 34
    FTIME = 35
    SYNC = 36
    KILL = 37
    RENAME = 38
    MKDIR = 39
    RMDIR = 40
    DUP = 41
    PIPE = 42
    TIMES = 43
    PROF = 44
    BRK = 45
    SETGID = 46
    GETGID = 47
    SIGNAL = 48
    GETEUID = 49
    GETEGID = 50
    ACCT = 51
    PHYS = 52
    LOCK = 53
    IOCTL = 54
    FCNTL = 55
    MPX = 56
    SETPGID = 57
    ULIMIT = 58
    UNAME = 59
    UMASK = 60
    CHROOT = 61
    USTAT = 62
    DUP2 = 63
    GETPPID = 64
    GETPGRP = 65
    SETSID = 66
    SIGACTION = 67
    SGETMASK = 68
    SSETMASK = 69
    SETREUID = 70
    SETREGID = 71
    WHOAMI = 72
    IAM = 73
    SEM_CREATE = 74
    SEM_SET = 75
    SEM_WAIT = 76
    SEM_SIGNAL = 77
    PC_INSERT = 78
    PC_DELETE = 79


def check_result(res: int) -> int:
    """Return a non-negative raw result; a negative one raises SyscallError."""
    if res >= 0:
        return res
    raise SyscallError(-res)