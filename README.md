# turmas

This is a small class-management service. One server listens on two ports:

- a **TCP** port (`PORTO_TURMAS`) for students (`aluno`) and teachers
  (`professor`);
- a **UDP** port (`PORTO_CONFIG`) for administrators (`administrador`).

Teachers create classes. Each class gets a multicast address of the form
`224.0.0.N`, numbered in the order the classes are created, and a maximum
capacity. Students list the classes and subscribe to them. Administrators
add, remove and list users.

## Installation

```
pip install .
```

## The users file

The server reads its users from a text file. Each line holds one user in the
form `username;password;type`, and the type is `administrador`, `aluno` or
`professor`:

```
admin;password;administrador
ana;password;aluno
rui;password;professor
```

Blank lines are skipped. A line that does not have three fields stops the
server at start-up with an error. When an administrator adds a user, the
server appends a line to this same file. When an administrator removes a
user, the server rewrites the file.

## Running the server

```
turmas-server {PORTO_TURMAS} {PORTO_CONFIG} {users file}
```

For example:

```
turmas-server 6000 5000 config.txt
```

The server logs logins and commands to standard error. An administrator can
stop it with `QUIT_SERVER`, and Ctrl+C stops it too.

## Student and teacher client

```
turmas-class-client {server address} {PORTO_TURMAS}
```

The client asks for a username and a password. Once they are accepted, it
shows a menu for the user's type.

Students get:

1. `LIST_CLASSES`
2. `LIST_SUBSCRIBED`
3. `SUBSCRIBE_CLASS {name}`
4. `EXIT`

Teachers get:

1. `LIST_CLASSES`
2. `CREATE_CLASS {name} {size}`
3. `SEND {name} {text}`
4. `EXIT`

Class names are changed to lower case before they are sent. If the password
is wrong, the client says so and asks again. Administrators cannot log in
over TCP; the client tells them so and asks again.

## Administration client

```
turmas-admin-client {server address} {PORTO_CONFIG}
```

Only administrators are accepted. The menu offers:

1. `ADD_USER {username} {password} {administrador/aluno/professor}`
2. `DEL {username}`
3. `LIST`
4. `EXIT`
5. `QUIT_SERVER`

The client changes the username and password to lower case before sending
them. It keeps asking for the type until the answer is one of the three
valid types.

## Server replies

When the server refuses a request, it replies `REJECTED (...)` with a reason:

- `ALREADY EXISTS`: the class or user already exists.
- `NOT FOUND`: there is no such class or user.
- `IS FULL`: the class has reached its capacity.
- `ALREADY SUBSCRIBED`: the student is already in the class.
- `LIMIT REACHED`: the server already holds ten classes.
- `CLASS DOESN'T EXIST`: a `SEND` named a class that does not exist.
- `NO USERS`: a `LIST` found no users.
- `INVALID ARGUMENTS`: `CREATE_CLASS` or `ADD_USER` was sent with too few
  fields.

When a request succeeds, the server replies:

- `OK <224.0.0.N>` when a class is created;
- `ACCEPTED <224.0.0.N>` when a student subscribes;
- `ACCEPTED`, `REMOVED` or `SENT` for the other commands.

`LIST_CLASSES` returns one line per class, `CLASS name first-student
capacity subscribers`. `LIST_SUBSCRIBED` returns one line per subscribed
class, `CLASS name/multicast`. If there are no classes at all, both return
`NO CLASSES`.

## Using it as a library

You can use the server's state directly, without the network:

- `turmas.users.UserStore` loads, authenticates, adds, removes, lists and
  saves users. `turmas.users.parse_user_line` parses one line of the users
  file.
- `turmas.classes.ClassRegistry` holds the classes (`turmas.classes.Turma`)
  and their subscriptions.
- `turmas.server.ClassServer` combines the two. Its `login_tcp`,
  `login_udp`, `handle_client_command` and `handle_admin_command` methods
  answer requests the way the network server does. `serve_forever` and
  `shutdown` start and stop the network service.
- `turmas.errors.Rejected` is the exception raised for a refused request.
  Its `reply()` method returns the `REJECTED (...)` line.

## What it does not do

- `SEND` does not deliver anything to students. The text is stored in the
  class's `messages` list and the teacher gets `SENT`. Nothing is sent to the
  class's multicast address, and no client listens on one.
- Classes are kept in memory only, so they are lost when the server stops.
  Only users are written to disk.
- The server does not answer an option the administration client does not
  know (`INVALID`). The client then waits for a reply that does not come.