"""
Lookup tables driving the scanner's keyword-versus-bareword heuristics.

Reference: perlfunc(1), perlsyn(1)
"""

KEYWORDS = frozenset("""
    __FILE__ __LINE__ __PACKAGE__ __DATA__ __END__ __SUB__
    AUTOLOAD BEGIN UNITCHECK DESTROY END INIT CHECK
    abs accept alarm and atan2 bind binmode bless break caller chdir chmod
    chomp chop chown chr chroot close closedir cmp connect continue cos
    crypt dbmclose dbmopen default defined delete die do dump each else
    elsif endgrent endhostent endnetent endprotoent endpwent endservent
    eof eq eval evalbytes exec exists exit exp fc fcntl fileno flock for
    foreach fork format formline ge getc getgrent getgrgid getgrnam
    gethostbyaddr gethostbyname gethostent getlogin getnetbyaddr
    getnetbyname getnetent getpeername getpgrp getppid getpriority
    getprotobyname getprotobynumber getprotoent getpwent getpwnam getpwuid
    getservbyname getservbyport getservent getsockname getsockopt given
    glob gmtime goto grep gt hex if index int ioctl join keys kill last
    lc lcfirst le length link listen local localtime lock log lstat lt m
    map mkdir msgctl msgget msgrcv msgsnd my ne next no not oct open
    opendir or ord our pack package pipe pop pos print printf prototype
    push q qq qr quotemeta qw qx rand read readdir readline readlink
    readpipe recv redo ref rename require reset return reverse rewinddir
    rindex rmdir s say scalar seek seekdir select semctl semget semop send
    setgrent sethostent setnetent setpgrp setpriority setprotoent setpwent
    setservent setsockopt shift shmctl shmget shmread shmwrite shutdown
    sin sleep socket socketpair sort splice split sprintf sqrt srand stat
    state study sub substr symlink syscall sysopen sysread sysseek system
    syswrite tell telldir tie tied time times tr truncate uc ucfirst umask
    undef unless unlink unpack unshift untie until use utime values vec
    wait waitpid wantarray warn when while write x xor y
""".split())

# Modules whose syntax extensions the scanner cannot follow; scanning stops
# right after they are recorded.
UNSUPPORTED_PACKAGES = frozenset("""
    MooseX::Declare
    Perl6::Attributes
    Text::RewriteRules
    Regexp::Grammars
    tt
    syntax
""".split())

IS_CONDITIONAL = frozenset(
    "if elsif unless else given when for foreach while until".split()
)

EXPECTS_EXPR_BLOCK = frozenset(
    "if elsif unless given when for foreach while until".split()
)

EXPECTS_BLOCK_LIST = frozenset("map grep sort".split())

EXPECTS_FH_LIST = frozenset("print printf say".split())

EXPECTS_FH_OR_BLOCK_LIST = EXPECTS_BLOCK_LIST | EXPECTS_FH_LIST

EXPECTS_BLOCK = frozenset("""
    else default eval sub do while until continue
    BEGIN END INIT CHECK
    if elsif unless given when for foreach map grep sort
""".split())

# Keywords followed by a bare name rather than an expression
EXPECTS_WORD = frozenset("use require no sub".split())

ENDS_EXPR = frozenset("""
    and or xor
    if else elsif unless when default
    for foreach while until
    && || !~ =~ = += -= *= /= **= //= %= ^= |=
    > < >= <= <> <=> cmp ge gt le lt eq ne ? :
""".split())

HAS_SIDE_EFFECT = frozenset("and or xor && || // if unless".split())

# Keywords after which a slash starts a regexp, not a division
REGEXP_MAY_FOLLOW = frozenset("""
    and or cmp if elsif unless eq ne gt lt ge le
    for while until grep map not split when
""".split())
